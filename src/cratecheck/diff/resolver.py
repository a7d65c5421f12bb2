"""Release commit resolution.

There is no reliable mapping from a published version to the commit it was
built from. Two heuristics are tried in order:

1. Tags. Most projects tag releases, but naming varies wildly
   (``v1.2.3``, ``foo-v1.2.3``, ``foo/1.2.3``, ``release-1.2.3``) and
   monorepos tag several crates with the same version.
2. Manifest history. Walk back from HEAD looking for the commit that set
   the package's declared version to the target.

Neither is a proof. The tag filters are ordered from loose to strict and the
first filter that narrows the candidates to a single commit wins; changing
the order changes which real repositories resolve.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

import pygit2
import semver

from cratecheck.core.logging import get_logger
from cratecheck.git.models import TagTarget
from cratecheck.git.repository import RepositoryHandle
from cratecheck.manifest.locator import ManifestLocator

log = get_logger("diff.resolver")


def tag_patterns(name: str, version: str) -> list[re.Pattern[str]]:
    """The three tag filters for ``name`` at ``version``, loosest first."""
    v = re.escape(version)
    n = re.escape(name)
    return [
        # Version not preceded by a digit 1-9: 0.1.8 must not match v10.1.8
        re.compile(rf"^(?:.*[^1-9])?{v}$"),
        # Crate name somewhere before the version
        re.compile(rf"^.*{n}(?:.*[^1-9])?{v}$"),
        # Only separators between name and version: guppy must not match guppy-summaries-1.0
        re.compile(rf"^.*{n}\W*{v}$"),
    ]


def is_version_bump(prior: str, post: str) -> bool:
    """True when ``post`` has strictly higher SemVer precedence than ``prior``."""
    try:
        return semver.Version.parse(post) > semver.Version.parse(prior)
    except ValueError:
        return False


def select_tagged_commit(tags: Iterable[TagTarget], name: str, version: str) -> str | None:
    """Pick the single commit the tags identify as ``name`` ``version``.

    Only tags whose name ends with ``version`` are considered. After each
    filter, tags are deduplicated by commit; the first filter leaving exactly
    one commit decides. Returns None when every filter leaves zero or
    several commits.
    """
    candidates = {t.name: t.commit_sha for t in tags if t.name.endswith(version)}
    for stage, pattern in enumerate(tag_patterns(name, version), start=1):
        candidates = {tag: sha for tag, sha in candidates.items() if pattern.match(tag)}
        commits = set(candidates.values())
        log.debug("tag_filter_applied", stage=stage, tags=sorted(candidates), commits=len(commits))
        if len(commits) == 1:
            return commits.pop()
    return None


class CommitResolver:
    """Finds the upstream commit of a published version."""

    def __init__(self, locator: ManifestLocator | None = None) -> None:
        self.locator = locator or ManifestLocator()

    def resolve(self, repository: RepositoryHandle, name: str, version: str) -> str | None:
        """Release commit of ``name`` ``version`` in ``repository``, or None.

        The repository's checkout is the same on return as on entry.
        """
        commit = self.resolve_from_tags(repository, name, version)
        strategy = "tags"
        if commit is None:
            commit = self.resolve_from_manifest_history(repository, name, version)
            strategy = "manifest_history"
        if commit is None:
            log.info("release_commit_not_found", name=name, version=version)
            return None
        log.info("release_commit_resolved", name=name, version=version, commit=commit, strategy=strategy)
        return commit

    def resolve_from_tags(self, repository: RepositoryHandle, name: str, version: str) -> str | None:
        return select_tagged_commit(repository.iter_tags(), name, version)

    def resolve_from_manifest_history(
        self, repository: RepositoryHandle, name: str, version: str
    ) -> str | None:
        """Newest non-merge commit that set the declared version of ``name`` to ``version``.

        A commit qualifies when, after it, the package declares ``version``
        and either its parent declared a lower version, its parent had no
        such package, or it has no parent at all. Only commits that touch a
        manifest file are checked out.
        """
        with repository.lease():
            for commit in repository.walk_from_head():
                if len(commit.parents) > 1:
                    continue
                if commit.parents and not self._touches_manifest(repository, commit):
                    continue
                if self._sets_version(repository, commit, name, version):
                    return str(commit.id)
        return None

    def _touches_manifest(self, repository: RepositoryHandle, commit: pygit2.Commit) -> bool:
        diff = repository.diff_trees(commit.parents[0].tree, commit.tree)
        filename = self.locator.filename
        for delta in diff.deltas:
            path = delta.new_file.path or delta.old_file.path
            if path.rsplit("/", 1)[-1] == filename:
                return True
        return False

    def _sets_version(
        self, repository: RepositoryHandle, commit: pygit2.Commit, name: str, version: str
    ) -> bool:
        repository.checkout(commit.id)
        post = self.locator.version_of(repository, name)
        log.debug("manifest_version_checked", commit=str(commit.id), version=post)
        if post != version:
            return False
        if not commit.parents:
            return True

        repository.checkout(commit.parents[0].id)
        prior = self.locator.version_of(repository, name)
        if prior is None:
            return True
        return is_version_bump(prior, post)
