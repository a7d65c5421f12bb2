"""Fixtures for source diff tests: an upstream monorepo and its published crates."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

import pytest

from cratecheck.diff import SourceDiffAnalyzer
from cratecheck.workspace import Workspace

if TYPE_CHECKING:
    from tests.conftest import RepoBuilder

LIB_V1 = "pub fn answer() -> u32 { 42 }\n"
LIB_V2 = "pub fn answer() -> u32 { 43 }\n"


@pytest.fixture
def upstream(repo_builder: Callable[[str], RepoBuilder], cargo_toml: Callable[..., str]) -> RepoBuilder:
    """Workspace repo hosting ``foo`` under crates/foo, tagged foo-v0.1.0 and foo-v0.2.0."""
    builder = repo_builder("upstream")
    v1 = builder.commit(
        "foo 0.1.0",
        {
            "Cargo.toml": '[workspace]\nmembers = ["crates/*"]\n',
            "crates/foo/Cargo.toml": cargo_toml("foo", "0.1.0"),
            "crates/foo/src/lib.rs": LIB_V1,
            "crates/foo/tests/it.rs": "#[test]\nfn it() {}\n",
            "crates/bar/Cargo.toml": cargo_toml("bar", "0.1.0"),
        },
    )
    builder.tag("foo-v0.1.0", v1)
    v2 = builder.commit(
        "foo 0.2.0",
        {"crates/foo/Cargo.toml": cargo_toml("foo", "0.2.0"), "crates/foo/src/lib.rs": LIB_V2},
    )
    builder.tag("foo-v0.2.0", v2)
    return builder


@pytest.fixture
def published_files(cargo_toml: Callable[..., str]) -> dict[str, str]:
    """What `cargo publish` would upload for foo 0.1.0."""
    return {
        "Cargo.toml": "# normalized by cargo\n" + cargo_toml("foo", "0.1.0"),
        "Cargo.toml.orig": cargo_toml("foo", "0.1.0"),
        ".cargo_vcs_info.json": '{"git": {"sha1": "abc"}}\n',
        "Cargo.lock": "version = 3\n",
        "src/lib.rs": LIB_V1,
    }


@pytest.fixture
def analyzer(workspace: Workspace) -> SourceDiffAnalyzer:
    return SourceDiffAnalyzer(workspace)
