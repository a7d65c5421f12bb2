"""Serializable data models for git objects the analysis reports on."""

from __future__ import annotations

from dataclasses import dataclass

import pygit2


@dataclass(frozen=True, slots=True)
class TagTarget:
    """A tag name and the commit it ultimately points to."""

    name: str
    commit_sha: str


@dataclass(frozen=True, slots=True)
class DiffSummary:
    """Line and file counts of a tree-to-tree diff."""

    files_changed: int
    insertions: int
    deletions: int

    @classmethod
    def from_pygit2(cls, diff: pygit2.Diff) -> DiffSummary:
        stats = diff.stats
        return cls(
            files_changed=stats.files_changed,
            insertions=stats.insertions,
            deletions=stats.deletions,
        )
