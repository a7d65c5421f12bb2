"""Source diff orchestration.

Compares what crates.io serves against what the upstream repository holds:

    published tarball ──► single-commit repository ◄──bridge── upstream clone
                                     │                               │
                                     └──── diff(scoped upstream tree, published tree)

Every checkout of the upstream clone happens under one lease, so the clone
is back on its original HEAD when the analysis returns or raises.
"""

from __future__ import annotations

from pathlib import PurePosixPath

import pygit2

from cratecheck.core.errors import ManifestNotFoundError, ReleaseCommitNotFoundError
from cratecheck.core.logging import analysis_context, get_logger
from cratecheck.diff.differ import classify_deltas
from cratecheck.diff.models import (
    CommitNotFound,
    Compared,
    CrateSourceDiffReport,
    ManifestNotFound,
    NoRepository,
    VersionDiffInfo,
)
from cratecheck.diff.resolver import CommitResolver
from cratecheck.diff.subtree import scope
from cratecheck.git.bridge import bridge
from cratecheck.git.repository import RepositoryHandle
from cratecheck.manifest.locator import ManifestLocator
from cratecheck.workspace.workspace import Workspace

log = get_logger("diff.analyzer")


class SourceDiffAnalyzer:
    """Runs source diffs inside one workspace.

    Usage::

        with Workspace() as ws:
            analyzer = SourceDiffAnalyzer(ws)
            report = analyzer.analyze_crate_source_diff(
                "serde", "1.0.200", "https://github.com/serde-rs/serde"
            )
    """

    def __init__(self, workspace: Workspace, *, resolver: CommitResolver | None = None) -> None:
        self.workspace = workspace
        diff_config = workspace.config.diff
        self.locator = ManifestLocator(diff_config.manifest_filename)
        self.resolver = resolver or CommitResolver(self.locator)
        self.ignore_paths = frozenset(diff_config.ignore_paths)

    def analyze_crate_source_diff(
        self, name: str, version: str, repository_url: str | None = None
    ) -> CrateSourceDiffReport:
        """Compare the published ``name`` ``version`` with its upstream release commit.

        Missing repository, unresolvable release commit and a manifest missing
        at the release commit are reported as outcomes. Download, clone and
        layout failures raise.
        """
        with analysis_context(name, version):
            return self._analyze(name, version, repository_url)

    def _analyze(self, name: str, version: str, repository_url: str | None) -> CrateSourceDiffReport:
        if not repository_url:
            log.info("source_diff_skipped", reason="no_repository")
            return CrateSourceDiffReport(name, version, NoRepository())

        published = self.workspace.materialize_published_repository(name, version)
        upstream = self.workspace.materialize_clone(name, repository_url)

        with upstream.lease():
            commit = self.resolver.resolve(upstream, name, version)
            if commit is None:
                return CrateSourceDiffReport(name, version, CommitNotFound())

            bridge(upstream, published, commit)
            package_dir = self._package_dir(upstream, commit, name)
            if package_dir is None:
                log.info("source_diff_manifest_missing", commit=commit)
                return CrateSourceDiffReport(name, version, ManifestNotFound(commit))

        upstream_tree = scope(published, published.get_commit(commit).tree, package_dir)
        diff = published.diff_trees(upstream_tree, published.head_tree())
        stats = classify_deltas(diff, self.ignore_paths)
        log.info(
            "source_diff_compared",
            commit=commit,
            is_different=stats.is_different,
            added=len(stats.files_added),
            modified=len(stats.files_modified),
            deleted=len(stats.files_deleted),
        )
        return CrateSourceDiffReport(name, version, Compared(commit, stats))

    def version_diff(
        self, name: str, repository: RepositoryHandle, version_a: str, version_b: str
    ) -> VersionDiffInfo:
        """Diff the package subtree of two releases within one repository.

        Raises:
            ReleaseCommitNotFoundError: a version has no release commit;
                ``version_a`` is checked first.
            ManifestNotFoundError: the package is absent at a release commit.
            PathNotFoundError: the package directory is absent from a tree.
        """
        with analysis_context(name, f"{version_a}..{version_b}"), repository.lease():
            commit_a = self._require_commit(repository, name, version_a)
            commit_b = self._require_commit(repository, name, version_b)
            tree_a = self._package_tree(repository, commit_a, name)
            tree_b = self._package_tree(repository, commit_b, name)

        diff = repository.diff_trees(tree_a, tree_b)
        log.info("version_diff_computed", name=name, version_a=version_a, version_b=version_b)
        return VersionDiffInfo(repository, commit_a, commit_b, diff)

    def version_diff_between_repositories(
        self, repo_a: RepositoryHandle, repo_b: RepositoryHandle
    ) -> VersionDiffInfo:
        """Diff the HEAD trees of two unrelated repositories.

        ``repo_b`` is bridged into ``repo_a`` and the diff lives there. Trees
        are compared whole; each repository is expected to hold one package
        at its root.
        """
        commit_a = repo_a.head_commit()
        commit_b = repo_b.head_commit()
        bridge(repo_b, repo_a, commit_b.id)
        diff = repo_a.diff_trees(commit_a.tree, repo_a.get_commit(commit_b.id).tree)
        return VersionDiffInfo(repo_a, str(commit_a.id), str(commit_b.id), diff)

    def published_version_diff(self, name: str, version_a: str, version_b: str) -> VersionDiffInfo:
        """Diff two published versions of ``name`` as served by the registry."""
        with analysis_context(name, f"{version_a}..{version_b}"):
            repo_a = self.workspace.materialize_published_repository(name, version_a)
            repo_b = self.workspace.materialize_published_repository(name, version_b)
            return self.version_diff_between_repositories(repo_a, repo_b)

    def _require_commit(self, repository: RepositoryHandle, name: str, version: str) -> str:
        commit = self.resolver.resolve(repository, name, version)
        if commit is None:
            raise ReleaseCommitNotFoundError.for_version(name, version)
        return commit

    def _package_dir(
        self, repository: RepositoryHandle, commit: str, name: str
    ) -> PurePosixPath | None:
        # Caller holds the lease
        repository.checkout(commit)
        try:
            return self.locator.locate(repository, name).parent
        except ManifestNotFoundError:
            return None

    def _package_tree(self, repository: RepositoryHandle, commit: str, name: str) -> pygit2.Tree:
        repository.checkout(commit)
        package_dir = self.locator.locate(repository, name).parent
        return scope(repository, repository.get_commit(commit).tree, package_dir)
