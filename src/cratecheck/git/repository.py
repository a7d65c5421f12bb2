"""Repository handle - owns a pygit2.Repository and its working-tree lock."""

from __future__ import annotations

import os
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path

import pygit2

from cratecheck.config.constants import COMMIT_SIGNATURE_EMAIL, COMMIT_SIGNATURE_NAME
from cratecheck.core.logging import get_logger
from cratecheck.git._internal import extract_tag_name, git_operation
from cratecheck.git._internal.constants import CHECKOUT_FORCE, SORT_TIME
from cratecheck.git.credentials import CloneCallbacks
from cratecheck.git.errors import (
    GitError,
    LeaseRequiredError,
    NotARepositoryError,
    RefNotFoundError,
)
from cratecheck.git.models import TagTarget

log = get_logger("git.repository")


@dataclass(frozen=True, slots=True)
class _HeadSnapshot:
    """Where HEAD pointed when a lease was taken."""

    refname: str | None  # None when HEAD was detached
    commit_id: pygit2.Oid


class RepositoryHandle:
    """An opened local repository with a checkout lease.

    The working tree is process-visible shared state. Every operation that
    checks out a commit must run inside ``lease()``, which serializes callers
    and puts HEAD and the working tree back where they were on exit.
    """

    def __init__(self, repo_path: Path | str) -> None:
        self._path = Path(repo_path)
        try:
            self._repo = pygit2.Repository(str(self._path))
        except pygit2.GitError as e:
            raise NotARepositoryError(str(self._path)) from e
        self._lock = threading.RLock()
        self._lease_depth = 0
        self._leased_head: _HeadSnapshot | None = None

    def __repr__(self) -> str:
        return f"RepositoryHandle({str(self.path)!r})"

    @property
    def repo(self) -> pygit2.Repository:
        """
        Direct access to underlying pygit2 Repository.

        Escape hatch for tests and advanced consumers. Bypasses the lease.
        """
        return self._repo

    @property
    def path(self) -> Path:
        """Working directory."""
        return Path(self._repo.workdir) if self._repo.workdir else self._path

    @property
    def git_dir(self) -> Path:
        return Path(self._repo.path)

    # =========================================================================
    # Object Access
    # =========================================================================

    def head_commit(self) -> pygit2.Commit:
        if self._repo.head_is_unborn:
            raise GitError("HEAD has no commits (unborn branch)")
        return self._repo.head.peel(pygit2.Commit)

    def head_tree(self) -> pygit2.Tree:
        return self.head_commit().tree

    def get_commit(self, oid: pygit2.Oid | str) -> pygit2.Commit:
        obj = self._repo.get(oid)
        if isinstance(obj, pygit2.Tag):
            obj = obj.peel(pygit2.Commit)
        if not isinstance(obj, pygit2.Commit):
            raise RefNotFoundError(f"{oid} is not a commit")
        return obj

    def get_object(self, oid: pygit2.Oid | str) -> pygit2.Object | None:
        return self._repo.get(oid)

    def has_commit(self, oid: pygit2.Oid | str) -> bool:
        return isinstance(self._repo.get(oid), pygit2.Commit)

    def iter_tags(self) -> Iterator[TagTarget]:
        """
        Iterate tags that ultimately point at a commit.

        Annotated tags (including tags of tags) are peeled; tags of trees
        or blobs are skipped.
        """
        for refname in self._repo.references:
            name = extract_tag_name(refname)
            if name is None:
                continue
            target = self._repo.references[refname].resolve().target
            obj = self._repo.get(target)
            while isinstance(obj, pygit2.Tag):
                obj = self._repo.get(obj.target)
            if isinstance(obj, pygit2.Commit):
                yield TagTarget(name, str(obj.id))
            else:
                log.debug("tag_skipped_non_commit", tag=name)

    def walk_from_head(self) -> Iterator[pygit2.Commit]:
        """Commits reachable from HEAD, newest first by commit time.

        Inside a lease, walks from HEAD as recorded by the outermost lease so
        earlier checkouts in the same lease do not shorten the history.
        """
        start = self._leased_head.commit_id if self._leased_head else self.head_commit().id
        return iter(self._repo.walk(start, SORT_TIME))

    def diff_trees(self, old: pygit2.Tree, new: pygit2.Tree) -> pygit2.Diff:
        """Changes needed to turn ``old`` into ``new``."""
        with git_operation("diff"):
            return self._repo.diff(old, new)

    # =========================================================================
    # Remotes
    # =========================================================================

    def ensure_remote(self, name: str, url: str) -> pygit2.Remote:
        """Return remote ``name`` pointing at ``url``, creating or repointing it."""
        with git_operation("configure remote", remote=name):
            existing = {r.name: r for r in self._repo.remotes}
            if name not in existing:
                return self._repo.remotes.create(name, url)
            if existing[name].url != url:
                self._repo.remotes.set_url(name, url)
            return self._repo.remotes[name]

    # =========================================================================
    # Checkout Lease
    # =========================================================================

    @contextmanager
    def lease(self) -> Iterator[RepositoryHandle]:
        """
        Hold the working tree for the duration of the block.

        Contract:
        - Serializes against other leases on the same handle (re-entrant
          for the holding thread).
        - The outermost lease records HEAD on entry and restores both HEAD
          and the working tree on exit, whether the block returns early,
          completes or raises.
        """
        with self._lock:
            snapshot = self._snapshot_head() if self._lease_depth == 0 else None
            if snapshot is not None:
                self._leased_head = snapshot
            self._lease_depth += 1
            try:
                yield self
            finally:
                self._lease_depth -= 1
                if snapshot is not None:
                    self._leased_head = None
                    self._restore_head(snapshot)

    def checkout(self, oid: pygit2.Oid | str) -> pygit2.Commit:
        """Force-checkout a commit and detach HEAD onto it. Requires a lease."""
        if self._lease_depth == 0:
            raise LeaseRequiredError("checkout")
        commit = self.get_commit(oid)
        with git_operation("checkout"):
            self._repo.checkout_tree(commit.tree, strategy=CHECKOUT_FORCE)
            self._repo.set_head(commit.id)
        return commit

    def _snapshot_head(self) -> _HeadSnapshot:
        commit = self.head_commit()
        refname = None if self._repo.head_is_detached else self._repo.head.name
        return _HeadSnapshot(refname, commit.id)

    def _restore_head(self, snapshot: _HeadSnapshot) -> None:
        commit = self.get_commit(snapshot.commit_id)
        with git_operation("restore checkout"):
            self._repo.checkout_tree(commit.tree, strategy=CHECKOUT_FORCE)
            self._repo.set_head(snapshot.refname or snapshot.commit_id)
        log.debug("checkout_restored", repo=str(self.path), commit=str(snapshot.commit_id))

    # =========================================================================
    # Construction
    # =========================================================================

    @classmethod
    def init_single_commit(cls, path: Path | str, message: str = "initial commit") -> RepositoryHandle:
        """Turn a plain directory into a repository holding one commit of its files.

        Every file is staged, including files matched by a ``.gitignore`` in the
        directory or by the user's excludes.
        """
        with git_operation("init"):
            repo = pygit2.init_repository(str(path))
            for relpath in _files_under(Path(path)):
                repo.index.add(relpath)
            repo.index.write()
            tree = repo.index.write_tree()
            sig = pygit2.Signature(COMMIT_SIGNATURE_NAME, COMMIT_SIGNATURE_EMAIL)
            repo.create_commit("HEAD", sig, sig, message, tree, [])
        return cls(path)

    @classmethod
    def clone(cls, url: str, path: Path | str) -> RepositoryHandle:
        """Clone ``url`` into ``path``."""
        with git_operation("clone", remote=url):
            pygit2.clone_repository(url, str(path), callbacks=CloneCallbacks())
        return cls(path)


def _files_under(root: Path) -> list[str]:
    """Repository-relative paths of every file and symlink below ``root``, minus .git."""
    found: list[str] = []
    for dirpath, dirnames, filenames in os.walk(root):
        base = Path(dirpath)
        if base == root:
            dirnames[:] = [d for d in dirnames if d != ".git"]
        links = [d for d in dirnames if (base / d).is_symlink()]
        dirnames[:] = [d for d in dirnames if d not in links]
        for name in [*filenames, *links]:
            found.append((base / name).relative_to(root).as_posix())
    return sorted(found)
