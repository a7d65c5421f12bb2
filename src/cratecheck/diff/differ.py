"""Classify tree diff deltas into added, modified and deleted file sets."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

import pygit2

from cratecheck.git._internal.constants import DELTA_ADDED, DELTA_DELETED, DELTA_MODIFIED


@dataclass(frozen=True, slots=True)
class FileDiffStats:
    """Paths that differ between two trees, relative to the tree roots."""

    files_added: frozenset[str] = field(default_factory=frozenset)
    files_modified: frozenset[str] = field(default_factory=frozenset)
    files_deleted: frozenset[str] = field(default_factory=frozenset)

    @property
    def is_different(self) -> bool:
        """Added or modified files. Deletions alone are files left out of the package."""
        return bool(self.files_added or self.files_modified)

    def to_dict(self) -> dict[str, Any]:
        return {
            "files_added": sorted(self.files_added),
            "files_modified": sorted(self.files_modified),
            "files_deleted": sorted(self.files_deleted),
        }


def classify_deltas(diff: pygit2.Diff, ignore_paths: Iterable[str] = ()) -> FileDiffStats:
    """Sort the deltas of ``diff`` by status, dropping paths in ``ignore_paths``.

    Renames and type changes are not detected, so every delta is one of
    added, deleted or modified.
    """
    ignored = frozenset(ignore_paths)
    added: set[str] = set()
    modified: set[str] = set()
    deleted: set[str] = set()

    for delta in diff.deltas:
        if delta.status == DELTA_ADDED:
            path = delta.new_file.path
            bucket = added
        elif delta.status == DELTA_DELETED:
            path = delta.old_file.path
            bucket = deleted
        elif delta.status == DELTA_MODIFIED:
            path = delta.new_file.path
            bucket = modified
        else:
            continue
        if path not in ignored:
            bucket.add(path)

    return FileDiffStats(frozenset(added), frozenset(modified), frozenset(deleted))
