"""Report types for source diffs.

A source diff stops at the first stage it cannot get past. The stage it
reached is a ``SourceDiffOutcome`` variant, so "nothing to compare" is never
confused with "compared, no difference"::

    outcome = report.outcome
    if isinstance(outcome, Compared):
        ...
    elif isinstance(outcome, ManifestNotFound):
        ...
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import pygit2

from cratecheck.diff.differ import FileDiffStats, classify_deltas
from cratecheck.git.models import DiffSummary
from cratecheck.git.repository import RepositoryHandle


@dataclass(frozen=True, slots=True)
class NoRepository:
    """No upstream repository URL was available."""


@dataclass(frozen=True, slots=True)
class CommitNotFound:
    """Neither tags nor manifest history identified the release commit."""


@dataclass(frozen=True, slots=True)
class ManifestNotFound:
    """The release commit was found but does not contain the package manifest."""

    commit: str


@dataclass(frozen=True, slots=True)
class Compared:
    """The published crate was diffed against the release commit."""

    commit: str
    stats: FileDiffStats


SourceDiffOutcome = NoRepository | CommitNotFound | ManifestNotFound | Compared


@dataclass(frozen=True, slots=True)
class CrateSourceDiffReport:
    """Result of comparing one published crate version with its upstream source."""

    name: str
    version: str
    outcome: SourceDiffOutcome

    @property
    def release_commit_found(self) -> bool | None:
        """None when there was no repository to search."""
        if isinstance(self.outcome, NoRepository):
            return None
        return not isinstance(self.outcome, CommitNotFound)

    @property
    def release_commit_analyzed(self) -> bool | None:
        if isinstance(self.outcome, Compared):
            return True
        if isinstance(self.outcome, ManifestNotFound):
            return False
        return None

    @property
    def release_commit(self) -> str | None:
        if isinstance(self.outcome, (Compared, ManifestNotFound)):
            return self.outcome.commit
        return None

    @property
    def file_diff_stats(self) -> FileDiffStats | None:
        return self.outcome.stats if isinstance(self.outcome, Compared) else None

    @property
    def is_different(self) -> bool | None:
        stats = self.file_diff_stats
        return stats.is_different if stats is not None else None

    def to_dict(self) -> dict[str, Any]:
        stats = self.file_diff_stats
        return {
            "name": self.name,
            "version": self.version,
            "release_commit_found": self.release_commit_found,
            "release_commit_analyzed": self.release_commit_analyzed,
            "release_commit": self.release_commit,
            "is_different": self.is_different,
            "file_diff_stats": stats.to_dict() if stats is not None else None,
        }


@dataclass(frozen=True, slots=True)
class VersionDiffInfo:
    """Tree diff between two commits that live in ``repository``."""

    repository: RepositoryHandle
    commit_a: str
    commit_b: str
    diff: pygit2.Diff

    def stats(self) -> DiffSummary:
        return DiffSummary.from_pygit2(self.diff)

    def file_diff_stats(self) -> FileDiffStats:
        """Added, modified and deleted paths going from ``commit_a`` to ``commit_b``."""
        return classify_deltas(self.diff)

    def to_dict(self) -> dict[str, Any]:
        summary = self.stats()
        return {
            "commit_a": self.commit_a,
            "commit_b": self.commit_b,
            "files_changed": summary.files_changed,
            "insertions": summary.insertions,
            "deletions": summary.deletions,
            **self.file_diff_stats().to_dict(),
        }
