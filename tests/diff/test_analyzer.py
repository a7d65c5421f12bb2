"""Tests for SourceDiffAnalyzer against locally built upstreams and a fake registry."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

import pygit2
import pytest

from cratecheck.core.errors import ReleaseCommitNotFoundError
from cratecheck.diff import (
    CommitNotFound,
    Compared,
    ManifestNotFound,
    NoRepository,
    SourceDiffAnalyzer,
)
from cratecheck.git import RepositoryHandle
from cratecheck.workspace import Workspace

if TYPE_CHECKING:
    from tests.conftest import FakeRegistry, RepoBuilder


class TestAnalyzeCrateSourceDiff:
    def test_no_repository(self, analyzer: SourceDiffAnalyzer, fake_registry: FakeRegistry) -> None:
        report = analyzer.analyze_crate_source_diff("foo", "0.1.0", None)

        assert report.outcome == NoRepository()
        assert report.release_commit_found is None
        assert report.release_commit_analyzed is None
        assert report.is_different is None
        assert report.file_diff_stats is None
        assert fake_registry.requests == []

    def test_identical_apart_from_registry_files(
        self,
        analyzer: SourceDiffAnalyzer,
        fake_registry: FakeRegistry,
        upstream: RepoBuilder,
        published_files: dict[str, str],
    ) -> None:
        fake_registry.publish("foo", "0.1.0", published_files)

        report = analyzer.analyze_crate_source_diff("foo", "0.1.0", upstream.url)

        assert isinstance(report.outcome, Compared)
        assert report.release_commit == str(upstream.repo.revparse_single("foo-v0.1.0").peel(pygit2.Commit).id)
        assert report.release_commit_found is True
        assert report.release_commit_analyzed is True
        assert report.is_different is False
        stats = report.file_diff_stats
        assert stats is not None
        assert stats.files_added == frozenset()
        assert stats.files_modified == frozenset()
        # Left out of the package, not a tampering signal
        assert stats.files_deleted == frozenset({"tests/it.rs"})

    def test_added_and_modified_files(
        self,
        analyzer: SourceDiffAnalyzer,
        fake_registry: FakeRegistry,
        upstream: RepoBuilder,
        published_files: dict[str, str],
    ) -> None:
        tampered = {
            **published_files,
            "src/lib.rs": "pub fn answer() -> u32 { std::process::exit(1) }\n",
            "src/payload.rs": "// not in git\n",
            "Cargo.lock": "version = 4\n",
        }
        fake_registry.publish("foo", "0.1.0", tampered)

        report = analyzer.analyze_crate_source_diff("foo", "0.1.0", upstream.url)

        assert report.is_different is True
        stats = report.file_diff_stats
        assert stats is not None
        assert stats.files_added == frozenset({"src/payload.rs"})
        assert stats.files_modified == frozenset({"src/lib.rs"})
        everything = stats.files_added | stats.files_modified | stats.files_deleted
        assert not everything & {"Cargo.toml", "Cargo.toml.orig", "Cargo.lock", ".cargo_vcs_info.json"}

    def test_ignored_files_in_tarball_are_compared(
        self,
        analyzer: SourceDiffAnalyzer,
        fake_registry: FakeRegistry,
        upstream: RepoBuilder,
        published_files: dict[str, str],
    ) -> None:
        # Given: the tarball ships a .gitignore that matches one of its own sources
        fake_registry.publish(
            "foo",
            "0.1.0",
            {**published_files, ".gitignore": "generated.rs\n", "src/generated.rs": "// injected\n"},
        )

        # When
        report = analyzer.analyze_crate_source_diff("foo", "0.1.0", upstream.url)

        # Then
        assert report.is_different is True
        stats = report.file_diff_stats
        assert stats is not None
        assert "src/generated.rs" in stats.files_added

    def test_release_commit_not_found(
        self,
        analyzer: SourceDiffAnalyzer,
        fake_registry: FakeRegistry,
        upstream: RepoBuilder,
        published_files: dict[str, str],
    ) -> None:
        fake_registry.publish("foo", "0.3.0", published_files)

        report = analyzer.analyze_crate_source_diff("foo", "0.3.0", upstream.url)

        assert report.outcome == CommitNotFound()
        assert report.release_commit_found is False
        assert report.release_commit_analyzed is None
        assert report.is_different is None

    def test_manifest_missing_at_release_commit(
        self,
        analyzer: SourceDiffAnalyzer,
        fake_registry: FakeRegistry,
        repo_builder: Callable[[str], RepoBuilder],
        cargo_toml: Callable[..., str],
        published_files: dict[str, str],
    ) -> None:
        # Tag predates the crate: it was added under a different layout later
        builder = repo_builder("moved")
        tagged = builder.commit("docs only", {"README.md": "# foo\n"})
        builder.tag("v0.1.0", tagged)
        builder.commit("add crate", {"foo/Cargo.toml": cargo_toml("foo", "0.1.0")})
        fake_registry.publish("foo", "0.1.0", published_files)

        report = analyzer.analyze_crate_source_diff("foo", "0.1.0", builder.url)

        assert report.outcome == ManifestNotFound(tagged)
        assert report.release_commit_found is True
        assert report.release_commit_analyzed is False
        assert report.is_different is None

    def test_upstream_checkout_restored(
        self,
        analyzer: SourceDiffAnalyzer,
        workspace: Workspace,
        fake_registry: FakeRegistry,
        upstream: RepoBuilder,
        published_files: dict[str, str],
    ) -> None:
        fake_registry.publish("foo", "0.1.0", published_files)

        analyzer.analyze_crate_source_diff("foo", "0.1.0", upstream.url)

        clone = workspace.materialize_clone("foo", upstream.url)
        assert clone.repo.head.name == "refs/heads/main"
        assert str(clone.head_commit().id) == str(upstream.repo.head.target)
        assert (clone.path / "crates" / "foo" / "Cargo.toml").read_text().endswith('"0.2.0"\nedition = "2021"\n')

    def test_to_dict(
        self,
        analyzer: SourceDiffAnalyzer,
        fake_registry: FakeRegistry,
        upstream: RepoBuilder,
        published_files: dict[str, str],
    ) -> None:
        fake_registry.publish("foo", "0.1.0", published_files)

        data = analyzer.analyze_crate_source_diff("foo", "0.1.0", upstream.url).to_dict()

        assert data["name"] == "foo"
        assert data["release_commit_found"] is True
        assert data["is_different"] is False
        assert data["file_diff_stats"]["files_deleted"] == ["tests/it.rs"]


class TestVersionDiff:
    def test_diff_between_releases(self, analyzer: SourceDiffAnalyzer, upstream: RepoBuilder) -> None:
        handle = RepositoryHandle(upstream.path)

        info = analyzer.version_diff("foo", handle, "0.1.0", "0.2.0")

        assert info.commit_a == str(upstream.repo.revparse_single("foo-v0.1.0").peel(pygit2.Commit).id)
        assert info.commit_b == str(upstream.repo.revparse_single("foo-v0.2.0").peel(pygit2.Commit).id)
        # Scoped to crates/foo
        assert info.file_diff_stats().files_modified == frozenset({"Cargo.toml", "src/lib.rs"})
        assert info.stats().files_changed == 2
        assert handle.repo.head.name == "refs/heads/main"

    def test_neither_version_resolves(self, analyzer: SourceDiffAnalyzer, upstream: RepoBuilder) -> None:
        handle = RepositoryHandle(upstream.path)

        with pytest.raises(ReleaseCommitNotFoundError) as exc_info:
            analyzer.version_diff("foo", handle, "9.9.9", "8.8.8")

        assert exc_info.value.name == "foo"
        assert exc_info.value.version == "9.9.9"

    def test_second_version_missing(self, analyzer: SourceDiffAnalyzer, upstream: RepoBuilder) -> None:
        handle = RepositoryHandle(upstream.path)

        with pytest.raises(ReleaseCommitNotFoundError) as exc_info:
            analyzer.version_diff("foo", handle, "0.1.0", "8.8.8")

        assert exc_info.value.version == "8.8.8"
        assert not handle.repo.head_is_detached


class TestPublishedVersionDiff:
    def test_diff_across_tarballs(
        self,
        analyzer: SourceDiffAnalyzer,
        fake_registry: FakeRegistry,
        published_files: dict[str, str],
    ) -> None:
        fake_registry.publish("foo", "0.1.0", published_files)
        fake_registry.publish(
            "foo",
            "0.2.0",
            {**published_files, "src/lib.rs": "pub fn answer() -> u32 { 43 }\n", "src/new.rs": "\n"},
        )

        info = analyzer.published_version_diff("foo", "0.1.0", "0.2.0")

        stats = info.file_diff_stats()
        assert stats.files_added == frozenset({"src/new.rs"})
        assert stats.files_modified == frozenset({"src/lib.rs"})
        assert stats.files_deleted == frozenset()
        assert info.commit_a != info.commit_b
