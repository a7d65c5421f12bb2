"""crates.io registry access."""

from cratecheck.registry.client import CrateMetadata, CratesIoClient

__all__ = ["CrateMetadata", "CratesIoClient"]
