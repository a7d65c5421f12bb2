"""Cargo manifest parsing and discovery."""

from cratecheck.manifest.locator import LocatedManifest, ManifestLocator, iter_manifest_paths
from cratecheck.manifest.parser import CargoManifest, ManifestKind, parse_manifest

__all__ = [
    "CargoManifest",
    "LocatedManifest",
    "ManifestKind",
    "ManifestLocator",
    "iter_manifest_paths",
    "parse_manifest",
]
