"""Release commit resolution and source diffing."""

from cratecheck.diff.analyzer import SourceDiffAnalyzer
from cratecheck.diff.differ import FileDiffStats, classify_deltas
from cratecheck.diff.models import (
    CommitNotFound,
    Compared,
    CrateSourceDiffReport,
    ManifestNotFound,
    NoRepository,
    SourceDiffOutcome,
    VersionDiffInfo,
)
from cratecheck.diff.resolver import CommitResolver, is_version_bump, select_tagged_commit, tag_patterns
from cratecheck.diff.subtree import scope

__all__ = [
    # Orchestration
    "SourceDiffAnalyzer",
    "CommitResolver",
    # Reports
    "CrateSourceDiffReport",
    "SourceDiffOutcome",
    "NoRepository",
    "CommitNotFound",
    "ManifestNotFound",
    "Compared",
    "VersionDiffInfo",
    "FileDiffStats",
    # Building blocks
    "classify_deltas",
    "is_version_bump",
    "scope",
    "select_tagged_commit",
    "tag_patterns",
]
