"""Remote bridging between two independently materialized repositories.

Two local repositories with unrelated histories (a published tarball turned
into a single-commit repository, and an upstream clone) can only be diffed
once their objects live in one object store. ``bridge`` is the only place
that wires one repository into another; it reads the source's on-disk copy
and never contacts the network.
"""

from __future__ import annotations

import pygit2

from cratecheck.config.constants import SOURCE_REMOTE_NAME
from cratecheck.core.logging import get_logger
from cratecheck.git._internal import git_operation, make_remote_refspec, make_tags_refspec
from cratecheck.git.errors import BridgeError
from cratecheck.git.repository import RepositoryHandle

log = get_logger("git.bridge")


def bridge(
    source: RepositoryHandle,
    target: RepositoryHandle,
    commit: pygit2.Oid | str,
    *,
    remote_name: str = SOURCE_REMOTE_NAME,
) -> None:
    """Make ``commit`` from ``source`` available inside ``target``.

    Registers ``source`` as remote ``remote_name`` of ``target`` and fetches
    all of its branches (under refs/remotes/<remote_name>/) and tags.

    Raises:
        RemoteError: fetch failed.
        BridgeError: fetch succeeded but ``commit`` is not reachable from any
            branch or tag of ``source``.
    """
    url = str(source.git_dir)
    remote = target.ensure_remote(remote_name, url)
    refspecs = [make_remote_refspec(remote_name), make_tags_refspec()]
    with git_operation("fetch", remote=remote_name):
        remote.fetch(refspecs=refspecs)

    if not target.has_commit(commit):
        raise BridgeError(url, str(commit))
    log.info("bridge_fetched", source=url, target=str(target.path), commit=str(commit))
