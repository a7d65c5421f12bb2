"""Cargo.toml parsing - only the fields the analysis needs."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

from cratecheck.core.errors import ManifestParseError


class ManifestKind(str, Enum):
    """Role a manifest plays in its repository."""

    PACKAGE = "package"
    WORKSPACE = "workspace"


@dataclass(frozen=True, slots=True)
class CargoManifest:
    """Declared identity of one Cargo.toml.

    ``version`` is None when the package inherits its version from the
    workspace (``version.workspace = true``); ``inherits_version`` is set in
    that case. ``workspace_version`` is ``[workspace.package].version`` when
    the manifest is a workspace root that declares one.
    """

    path: Path
    kind: ManifestKind
    name: str | None = None
    version: str | None = None
    inherits_version: bool = False
    workspace_version: str | None = None

    @property
    def is_package(self) -> bool:
        return self.kind is ManifestKind.PACKAGE


def _string_field(table: dict[str, Any], key: str) -> str | None:
    value = table.get(key)
    return value if isinstance(value, str) else None


def parse_manifest(path: Path) -> CargoManifest:
    """Parse ``path`` into a CargoManifest.

    Raises:
        ManifestParseError: unreadable file, invalid TOML, or neither a
            ``[package]`` nor a ``[workspace]`` table.
    """
    try:
        with path.open("rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ManifestParseError.invalid(str(path), str(e)) from e

    workspace = data.get("workspace")
    workspace_version = None
    if isinstance(workspace, dict):
        ws_package = workspace.get("package")
        if isinstance(ws_package, dict):
            workspace_version = _string_field(ws_package, "version")

    package = data.get("package")
    if isinstance(package, dict):
        raw_version = package.get("version")
        inherits = isinstance(raw_version, dict) and raw_version.get("workspace") is True
        return CargoManifest(
            path=path,
            kind=ManifestKind.PACKAGE,
            name=_string_field(package, "name"),
            version=raw_version if isinstance(raw_version, str) else None,
            inherits_version=inherits,
            workspace_version=workspace_version,
        )

    if isinstance(workspace, dict):
        return CargoManifest(
            path=path,
            kind=ManifestKind.WORKSPACE,
            workspace_version=workspace_version,
        )

    raise ManifestParseError.invalid(str(path), "neither [package] nor [workspace] table")
