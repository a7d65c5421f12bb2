"""Translation of pygit2 failures into the git error hierarchy."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

import pygit2

from cratecheck.git.errors import AuthenticationError, GitError, RemoteError

# libgit2 has no dedicated error class for rejected credentials
_AUTH_MARKERS = ("authentication", "credential", "401", "403")


def _is_auth_failure(error: pygit2.GitError) -> bool:
    text = str(error).lower()
    return any(marker in text for marker in _AUTH_MARKERS)


@contextmanager
def git_operation(operation: str, *, remote: str | None = None) -> Iterator[None]:
    """Re-raise pygit2 errors from the block as ``GitError``.

    With ``remote`` set (clone, fetch) failures become ``RemoteError`` or,
    for rejected credentials, ``AuthenticationError``.
    """
    try:
        yield
    except pygit2.GitError as e:
        if remote is None:
            raise GitError(f"{operation} failed: {e}") from e
        if _is_auth_failure(e):
            raise AuthenticationError(remote, operation) from e
        raise RemoteError(remote, f"{operation} failed: {e}") from e
