"""Root conftest.py for test configuration.

Ensures local src/ directory takes priority over any installed packages, and
provides builders for upstream repositories and registry tarballs shared by
every test area.
"""

from __future__ import annotations

import io
import sys
import tarfile
from collections.abc import Callable, Iterator
from pathlib import Path

import httpx
import pygit2
import pytest

# Insert local src directory at the beginning of sys.path
_src_dir = Path(__file__).parent.parent / "src"
if str(_src_dir) not in sys.path:
    sys.path.insert(0, str(_src_dir))

from cratecheck.config.models import CrateCheckConfig, WorkspaceConfig  # noqa: E402
from cratecheck.workspace import Workspace  # noqa: E402

_BASE_TIME = 1_700_000_000


class RepoBuilder:
    """Builds an upstream-like repository commit by commit.

    Commit times increase by one minute per commit so time-sorted walks are
    deterministic.
    """

    def __init__(self, path: Path) -> None:
        path.mkdir(parents=True, exist_ok=True)
        self.path = path
        self.repo = pygit2.init_repository(str(path), initial_head="main")
        self.repo.config["user.name"] = "Test User"
        self.repo.config["user.email"] = "test@example.com"
        self._ticks = 0

    def _signature(self) -> pygit2.Signature:
        self._ticks += 1
        return pygit2.Signature("Test User", "test@example.com", _BASE_TIME + 60 * self._ticks, 0)

    def commit(
        self,
        message: str,
        files: dict[str, str | None] | None = None,
        *,
        parents: list[str] | None = None,
        ref: str | None = "HEAD",
    ) -> str:
        """Write ``files`` (None deletes) and commit on top of HEAD, returning the sha.

        With ``ref=None`` the commit is created without moving any reference.
        """
        index = self.repo.index
        for rel, content in (files or {}).items():
            target = self.path / rel
            if content is None:
                target.unlink()
                index.remove(rel)
            else:
                target.parent.mkdir(parents=True, exist_ok=True)
                target.write_text(content)
                index.add(rel)
        index.write()
        tree = index.write_tree()

        if parents is None:
            parents = [] if self.repo.head_is_unborn else [str(self.repo.head.target)]
        sig = self._signature()
        oid = self.repo.create_commit(ref, sig, sig, message, tree, parents)
        return str(oid)

    def tag(self, name: str, commit: str, *, annotated: bool = False) -> None:
        if annotated:
            sig = self._signature()
            self.repo.create_tag(name, commit, pygit2.enums.ObjectType.COMMIT, sig, f"release {name}")
        else:
            self.repo.references.create(f"refs/tags/{name}", commit)

    @property
    def url(self) -> str:
        return f"file://{self.path}"


def cargo_toml(name: str, version: str, extra: str = "") -> str:
    return f'[package]\nname = "{name}"\nversion = "{version}"\nedition = "2021"\n{extra}'


def build_tarball(entries: dict[str, str]) -> bytes:
    """gzip tar archive holding ``entries`` (archive path -> text content)."""
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w:gz") as tar:
        for name, content in entries.items():
            data = content.encode()
            info = tarfile.TarInfo(name)
            info.size = len(data)
            info.mode = 0o644
            tar.addfile(info, io.BytesIO(data))
    return buf.getvalue()


class FakeRegistry:
    """In-memory crates.io serving tarballs and JSON through httpx.MockTransport."""

    def __init__(self) -> None:
        self.tarballs: dict[tuple[str, str], bytes] = {}
        self.json: dict[str, object] = {}
        self.requests: list[httpx.Request] = []

    def publish(self, name: str, version: str, files: dict[str, str]) -> None:
        """Serve ``files`` as the ``name`` ``version`` crate, nested under ``<name>-<version>/``."""
        prefix = f"{name}-{version}"
        self.tarballs[(name, version)] = build_tarball({f"{prefix}/{k}": v for k, v in files.items()})

    def publish_raw(self, name: str, version: str, entries: dict[str, str]) -> None:
        """Serve an archive with exactly ``entries``, whatever their layout."""
        self.tarballs[(name, version)] = build_tarball(entries)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        parts = request.url.path.strip("/").split("/")
        if len(parts) == 6 and parts[:3] == ["api", "v1", "crates"] and parts[5] == "download":
            body = self.tarballs.get((parts[3], parts[4]))
            if body is None:
                return httpx.Response(404)
            return httpx.Response(200, content=body)
        payload = self.json.get(request.url.path)
        if payload is None:
            return httpx.Response(404, json={"errors": [{"detail": "Not Found"}]})
        return httpx.Response(200, json=payload)

    def client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self.handler))

    def downloads(self) -> list[str]:
        return [r.url.path for r in self.requests if r.url.path.endswith("/download")]


@pytest.fixture
def repo_builder(tmp_path: Path) -> Callable[[str], RepoBuilder]:
    """Factory creating RepoBuilder instances under tmp_path."""

    def _make(name: str = "upstream") -> RepoBuilder:
        return RepoBuilder(tmp_path / name)

    return _make


@pytest.fixture(name="cargo_toml")
def cargo_toml_fixture() -> Callable[..., str]:
    """The cargo_toml() helper, for tests that cannot import conftest."""
    return cargo_toml


@pytest.fixture
def fake_registry() -> FakeRegistry:
    return FakeRegistry()


@pytest.fixture
def workspace_config(tmp_path: Path) -> CrateCheckConfig:
    return CrateCheckConfig(workspace=WorkspaceConfig(base_dir=str(tmp_path / "scratch")))


@pytest.fixture
def workspace(workspace_config: CrateCheckConfig, fake_registry: FakeRegistry) -> Iterator[Workspace]:
    with Workspace(workspace_config, http_client=fake_registry.client()) as ws:
        yield ws
