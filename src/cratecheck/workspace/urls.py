"""Repository URL normalization."""

from __future__ import annotations

from urllib.parse import urlparse

from cratecheck.core.errors import InvalidRepositoryUrlError


def trim_remote_url(url: str) -> str:
    """Reduce a forge URL to ``https://<host>/<owner>/<repo>`` for cloning.

    Crates in monorepos often declare a repository URL that points inside
    the repository, e.g. ``https://github.com/o/r/tree/main/crate``.
    ``file://`` URLs name local mirrors and are returned unchanged.

    Raises:
        InvalidRepositoryUrlError: no host, owner or repository segment.
    """
    parsed = urlparse(url.strip())
    if parsed.scheme == "file":
        return url
    if not parsed.scheme or not parsed.hostname:
        raise InvalidRepositoryUrlError.malformed(url, "missing host")

    segments = [s for s in parsed.path.split("/") if s]
    if len(segments) < 1:
        raise InvalidRepositoryUrlError.malformed(url, "missing owner")
    if len(segments) < 2:
        raise InvalidRepositoryUrlError.malformed(url, "missing repository")

    owner = segments[0]
    repo = segments[1].removesuffix(".git")
    if not repo:
        raise InvalidRepositoryUrlError.malformed(url, "missing repository")
    return f"https://{parsed.hostname}/{owner}/{repo}"
