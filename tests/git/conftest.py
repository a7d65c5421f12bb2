"""Test fixtures for git module."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from cratecheck.git import RepositoryHandle

if TYPE_CHECKING:
    from tests.conftest import RepoBuilder


@pytest.fixture
def two_commit_repo(repo_builder: Callable[[str], RepoBuilder]) -> RepoBuilder:
    """Repository on main with two commits changing lib.rs."""
    builder = repo_builder("two-commits")
    builder.commit("first", {"README.md": "# demo\n", "src/lib.rs": "// v1\n"})
    builder.commit("second", {"src/lib.rs": "// v2\n"})
    return builder


@pytest.fixture
def handle(two_commit_repo: RepoBuilder) -> RepositoryHandle:
    return RepositoryHandle(two_commit_repo.path)


@pytest.fixture
def plain_dir(tmp_path: Path) -> Path:
    """Directory of files that is not yet a repository."""
    path = tmp_path / "published"
    (path / "src").mkdir(parents=True)
    (path / "Cargo.toml").write_text('[package]\nname = "demo"\nversion = "0.1.0"\n')
    (path / "src" / "lib.rs").write_text("pub fn demo() {}\n")
    return path
