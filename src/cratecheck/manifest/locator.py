"""Locate the Cargo.toml that governs a package inside a checkout.

A repository may host one crate at its root, several crates in
subdirectories, or a workspace whose members live anywhere below the root.
The locator walks the working tree (not the git index), so it reflects
whatever commit is currently checked out.
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING

from cratecheck.config.constants import MANIFEST_FILENAME
from cratecheck.core.errors import ManifestNotFoundError, ManifestParseError
from cratecheck.core.logging import get_logger
from cratecheck.manifest.parser import CargoManifest, parse_manifest

if TYPE_CHECKING:
    from cratecheck.git.repository import RepositoryHandle

log = get_logger("manifest.locator")

# Build output and VCS metadata never hold source manifests
_SKIP_DIRS = frozenset({".git", "target"})


def iter_manifest_paths(root: Path, filename: str = MANIFEST_FILENAME) -> Iterator[Path]:
    """Yield every ``filename`` below ``root``, top-down, directories in sorted order.

    Symlinked directories are followed once; hidden directories are skipped.
    """
    seen: set[Path] = set()
    for dirpath, dirnames, filenames in os.walk(root, followlinks=True):
        real = Path(dirpath).resolve()
        if real in seen:
            dirnames[:] = []
            continue
        seen.add(real)
        dirnames[:] = sorted(
            d for d in dirnames if d not in _SKIP_DIRS and not d.startswith(".")
        )
        if filename in filenames:
            yield Path(dirpath) / filename


@dataclass(frozen=True, slots=True)
class LocatedManifest:
    """A package manifest and its path relative to the repository root."""

    relative_path: PurePosixPath
    manifest: CargoManifest

    @property
    def package_dir(self) -> PurePosixPath:
        """Directory holding the package; ``PurePosixPath('.')`` for the root."""
        return self.relative_path.parent


class ManifestLocator:
    """Finds package manifests by name in a working tree."""

    def __init__(self, filename: str = MANIFEST_FILENAME) -> None:
        self.filename = filename

    def locate(self, repository: RepositoryHandle, name: str) -> PurePosixPath:
        """Relative path of the manifest declaring package ``name``.

        Raises:
            ManifestNotFoundError: no package manifest declares ``name``.
        """
        return self.find(repository.path, name).relative_path

    def find(self, root: Path, name: str) -> LocatedManifest:
        """Like ``locate`` but for a plain directory, returning the parsed manifest."""
        for path in iter_manifest_paths(root, self.filename):
            try:
                manifest = parse_manifest(path)
            except ManifestParseError as e:
                log.debug("manifest_skipped", path=str(path), reason=e.message)
                continue
            if manifest.is_package and manifest.name == name:
                relative = PurePosixPath(path.relative_to(root).as_posix())
                return LocatedManifest(relative, manifest)
        raise ManifestNotFoundError.for_package(name, str(root))

    def version_of(self, repository: RepositoryHandle, name: str) -> str | None:
        """Declared version of ``name`` in the current checkout, or None if absent."""
        root = repository.path
        try:
            located = self.find(root, name)
        except ManifestNotFoundError:
            return None
        return self.resolve_version(root, located.manifest)

    def resolve_version(self, root: Path, manifest: CargoManifest) -> str | None:
        """Version of a package manifest, following ``version.workspace = true``."""
        if manifest.version is not None or not manifest.inherits_version:
            return manifest.version

        root = root.resolve()
        for parent in manifest.path.resolve().parents:
            if parent != root and root not in parent.parents:
                break
            candidate = parent / self.filename
            if candidate.is_file() and candidate.resolve() != manifest.path.resolve():
                try:
                    ancestor = parse_manifest(candidate)
                except ManifestParseError as e:
                    log.debug("manifest_skipped", path=str(candidate), reason=e.message)
                    continue
                if ancestor.workspace_version is not None:
                    return ancestor.workspace_version
        return None
