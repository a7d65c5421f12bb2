"""Ephemeral workspace - scratch directory, downloads and local repositories.

Everything an analysis materializes (tarballs, extracted crates, clones)
lives under one temporary directory that is deleted when the workspace is
closed. Within one workspace, materialization is idempotent: asking twice
for the same tarball or clone reuses what is already on disk and returns the
same ``RepositoryHandle``.
"""

from __future__ import annotations

import tarfile
import tempfile
import threading
from pathlib import Path
from types import TracebackType

import httpx

from cratecheck.config.models import CrateCheckConfig
from cratecheck.core.errors import ExtractionError, ExtractionLayoutError, WorkspaceError
from cratecheck.core.logging import get_logger
from cratecheck.git.repository import RepositoryHandle
from cratecheck.registry.client import CratesIoClient
from cratecheck.workspace.urls import trim_remote_url

log = get_logger("workspace")


class Workspace:
    """Process-local scratch directory plus registry client.

    Usage::

        with Workspace() as ws:
            published = ws.materialize_published_repository("serde", "1.0.200")
            upstream = ws.materialize_clone("serde", "https://github.com/serde-rs/serde")
    """

    def __init__(
        self,
        config: CrateCheckConfig | None = None,
        *,
        http_client: httpx.Client | None = None,
    ) -> None:
        self._config = config or CrateCheckConfig()
        base_dir = self._config.workspace.base_dir
        if base_dir is not None:
            Path(base_dir).mkdir(parents=True, exist_ok=True)
        self._tmp = tempfile.TemporaryDirectory(prefix="cratecheck-", dir=base_dir)
        self._registry = CratesIoClient(self._config.registry, client=http_client)
        self._handles: dict[Path, RepositoryHandle] = {}
        self._lock = threading.Lock()
        self._closed = False
        log.debug("workspace_created", path=self._tmp.name)

    @property
    def path(self) -> Path:
        if self._closed:
            raise WorkspaceError.closed()
        return Path(self._tmp.name)

    @property
    def config(self) -> CrateCheckConfig:
        return self._config

    @property
    def registry(self) -> CratesIoClient:
        return self._registry

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Delete the scratch directory. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        try:
            self._registry.close()
        finally:
            self._handles.clear()
            self._tmp.cleanup()
            log.debug("workspace_released", path=self._tmp.name)

    def __enter__(self) -> Workspace:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    # =========================================================================
    # Tarballs
    # =========================================================================

    def materialize_tarball(self, name: str, version: str) -> Path:
        """Download and extract the published crate, returning its top-level directory.

        Raises:
            DownloadError: the registry did not serve the tarball.
            ExtractionError: the archive is corrupt or a member would escape it.
            ExtractionLayoutError: the archive does not unpack to exactly one entry.
        """
        dest_name = f"{name}-{version}-cratesio"
        dest = self.path / dest_name
        with self._lock:
            if not dest.exists():
                archive = self.path / f"{dest_name}.tar.gz"
                self._registry.download(name, version, archive)
                self._extract(archive, dest)
        return self._single_entry(dest)

    @staticmethod
    def _extract(archive: Path, dest: Path) -> None:
        dest.mkdir()
        try:
            with tarfile.open(archive, "r:gz") as tar:
                tar.extractall(dest, filter="data")
        except (tarfile.TarError, EOFError) as e:
            Workspace._discard(dest)
            raise ExtractionError.unreadable(str(archive), str(e)) from e
        except OSError:
            Workspace._discard(dest)
            raise

    @staticmethod
    def _discard(dest: Path) -> None:
        # Leave no half-extracted directory behind for the next call
        for child in sorted(dest.rglob("*"), reverse=True):
            if child.is_dir() and not child.is_symlink():
                child.rmdir()
            else:
                child.unlink()
        dest.rmdir()

    @staticmethod
    def _single_entry(dest: Path) -> Path:
        entries = list(dest.iterdir())
        if len(entries) != 1:
            raise ExtractionLayoutError.unexpected_entries(str(dest), [e.name for e in entries])
        return entries[0]

    def materialize_published_repository(self, name: str, version: str) -> RepositoryHandle:
        """The published crate as a repository holding a single commit."""
        path = self.materialize_tarball(name, version)
        with self._lock:
            handle = self._handles.get(path)
            if handle is None:
                if (path / ".git").exists():
                    handle = RepositoryHandle(path)
                else:
                    handle = RepositoryHandle.init_single_commit(path)
                    log.info("published_repository_created", name=name, version=version)
                self._handles[path] = handle
        return handle

    # =========================================================================
    # Clones
    # =========================================================================

    def materialize_clone(self, name: str, url: str) -> RepositoryHandle:
        """Clone the upstream repository of ``name`` once per workspace.

        Raises:
            InvalidRepositoryUrlError: ``url`` cannot be normalized.
            RemoteError: clone failed.
        """
        url = trim_remote_url(url)
        dest = self.path / f"{name}-source"
        with self._lock:
            handle = self._handles.get(dest)
            if handle is None:
                if dest.exists():
                    handle = RepositoryHandle(dest)
                else:
                    handle = RepositoryHandle.clone(url, dest)
                    log.info("repository_cloned", name=name, url=url)
                self._handles[dest] = handle
        return handle
