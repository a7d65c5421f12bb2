"""crates.io API client.

Only the endpoints the analysis consumes: crate metadata, reverse-dependent
counts, per-version download counts, and the tarball download URL.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import httpx

from cratecheck.config.models import RegistryConfig
from cratecheck.core.errors import DownloadError, RegistryError
from cratecheck.core.logging import get_logger

log = get_logger("registry.client")


@dataclass(frozen=True, slots=True)
class CrateMetadata:
    """Popularity metrics of one crate."""

    name: str
    hosted: bool
    downloads: int = 0
    dependents: int = 0


def _int_at(payload: dict[str, Any], section: str, key: str, url: str) -> int:
    table = payload.get(section)
    value = table.get(key) if isinstance(table, dict) else None
    if not isinstance(value, int) or isinstance(value, bool):
        raise RegistryError.unexpected_payload(url, f"{section}.{key}")
    return value


class CratesIoClient:
    """Thin synchronous client over the crates.io v1 API."""

    def __init__(
        self,
        config: RegistryConfig | None = None,
        *,
        client: httpx.Client | None = None,
    ) -> None:
        self._config = config or RegistryConfig()
        self._owns_client = client is None
        self._client = client or httpx.Client(
            headers={"User-Agent": self._config.user_agent},
            timeout=self._config.timeout_sec,
            follow_redirects=True,
        )

    @property
    def base_url(self) -> str:
        return self._config.base_url

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> CratesIoClient:
        return self

    def __exit__(self, *_exc: object) -> None:
        self.close()

    def download_url(self, name: str, version: str) -> str:
        return f"{self.base_url}/api/v1/crates/{name}/{version}/download"

    def download(self, name: str, version: str, dest: Path) -> Path:
        """Stream the published tarball of ``name`` ``version`` into ``dest``.

        Raises:
            DownloadError: non-2xx response or transport failure.
        """
        url = self.download_url(name, version)
        try:
            with self._client.stream("GET", url) as response:
                if not response.is_success:
                    raise DownloadError.from_status(url, response.status_code)
                with dest.open("wb") as f:
                    for chunk in response.iter_bytes():
                        f.write(chunk)
        except httpx.TransportError as e:
            raise DownloadError.transport(url, str(e)) from e
        log.info("tarball_downloaded", name=name, version=version, dest=str(dest))
        return dest

    def _get_json(self, url: str) -> dict[str, Any]:
        try:
            response = self._client.get(url)
        except httpx.TransportError as e:
            raise RegistryError.transport(url, str(e)) from e
        if not response.is_success:
            raise RegistryError.request_failed(url, response.status_code)
        try:
            data = response.json()
        except ValueError as e:
            raise RegistryError.invalid_body(url, str(e)) from e
        if not isinstance(data, dict):
            raise RegistryError.invalid_body(url, f"got {type(data).__name__}")
        return data

    def get(self, name: str, *, hosted: bool = True) -> CrateMetadata:
        """Downloads and direct dependents of ``name``.

        Crates not hosted on crates.io (path or git dependencies) get zeroed
        metrics without a request.
        """
        if not hosted:
            return CrateMetadata(name=name, hosted=False)

        url = f"{self.base_url}/api/v1/crates/{name}"
        downloads = _int_at(self._get_json(url), "crate", "downloads", url)
        dependents = self.reverse_dependents(name)
        log.debug("crate_metadata_fetched", name=name, downloads=downloads, dependents=dependents)
        return CrateMetadata(name=name, hosted=True, downloads=downloads, dependents=dependents)

    def reverse_dependents(self, name: str) -> int:
        """Total number of crates that depend directly on ``name``."""
        url = f"{self.base_url}/api/v1/crates/{name}/reverse_dependencies"
        return _int_at(self._get_json(url), "meta", "total", url)

    def version_downloads(self, name: str, version: str) -> int:
        """Download count of one published version."""
        url = f"{self.base_url}/api/v1/crates/{name}/{version}"
        return _int_at(self._get_json(url), "version", "downloads", url)
