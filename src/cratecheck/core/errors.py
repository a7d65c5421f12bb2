"""cratecheck error types with typed error codes.

Error code ranges:
- 2xxx: Config
- 3xxx: Workspace (download, extraction, repository URLs)
- 4xxx: Manifest
- 5xxx: Registry
- 6xxx: Diff
- 9xxx: Internal

Git failures have their own hierarchy in ``cratecheck.git.errors``.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002
    CONFIG_MISSING_REQUIRED = 2003
    CONFIG_FILE_NOT_FOUND = 2004

    # Workspace (3xxx)
    WORKSPACE_DOWNLOAD_FAILED = 3001
    WORKSPACE_EXTRACTION_LAYOUT = 3002
    WORKSPACE_INVALID_REPOSITORY_URL = 3003
    WORKSPACE_CLOSED = 3004
    WORKSPACE_EXTRACTION_FAILED = 3005

    # Manifest (4xxx)
    MANIFEST_NOT_FOUND = 4001
    MANIFEST_PARSE_ERROR = 4002

    # Registry (5xxx)
    REGISTRY_REQUEST_FAILED = 5001
    REGISTRY_UNEXPECTED_PAYLOAD = 5002

    # Diff (6xxx)
    RELEASE_COMMIT_NOT_FOUND = 6001

    # Internal (9xxx)
    INTERNAL_ERROR = 9001


# Mutable: contextlib re-raising through a generator assigns __traceback__
@dataclass(eq=False)
class CrateCheckError(Exception):
    """Base error with structured context for reports and CLI output."""

    code: ErrorCode
    message: str
    retryable: bool = False
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'MANIFEST_NOT_FOUND')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON output."""
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "retryable": self.retryable,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class ConfigError(CrateCheckError):
    """Configuration-related errors."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field: str, value: Any, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field}': {reason}",
            details={"field": field, "value": str(value), "reason": reason},
        )


class WorkspaceError(CrateCheckError):
    """Failures while materializing tarballs or clones."""

    @classmethod
    def closed(cls) -> "WorkspaceError":
        return cls(
            code=ErrorCode.WORKSPACE_CLOSED,
            message="Workspace has already been released",
        )


class DownloadError(WorkspaceError):
    """Tarball download failed."""

    @classmethod
    def from_status(cls, url: str, status_code: int) -> "DownloadError":
        return cls(
            code=ErrorCode.WORKSPACE_DOWNLOAD_FAILED,
            message=f"Download of {url} failed with HTTP {status_code}",
            details={"url": url, "status_code": status_code},
        )

    @classmethod
    def transport(cls, url: str, reason: str) -> "DownloadError":
        return cls(
            code=ErrorCode.WORKSPACE_DOWNLOAD_FAILED,
            message=f"Download of {url} failed: {reason}",
            details={"url": url, "reason": reason},
        )


class ExtractionError(WorkspaceError):
    """Archive is corrupt or holds members that may not be extracted."""

    @classmethod
    def unreadable(cls, archive: str, reason: str) -> "ExtractionError":
        return cls(
            code=ErrorCode.WORKSPACE_EXTRACTION_FAILED,
            message=f"Cannot extract {archive}: {reason}",
            details={"archive": archive, "reason": reason},
        )


class ExtractionLayoutError(WorkspaceError):
    """Extracted archive does not contain exactly one top-level entry."""

    @classmethod
    def unexpected_entries(cls, path: str, entries: list[str]) -> "ExtractionLayoutError":
        return cls(
            code=ErrorCode.WORKSPACE_EXTRACTION_LAYOUT,
            message=(
                f"Expected exactly one top-level entry in {path}, found {len(entries)}"
            ),
            details={"path": path, "entries": sorted(entries)},
        )


class InvalidRepositoryUrlError(WorkspaceError):
    """Repository URL cannot be reduced to host/owner/repo."""

    @classmethod
    def malformed(cls, url: str, reason: str) -> "InvalidRepositoryUrlError":
        return cls(
            code=ErrorCode.WORKSPACE_INVALID_REPOSITORY_URL,
            message=f"Invalid repository url {url!r}: {reason}",
            details={"url": url, "reason": reason},
        )


class ManifestError(CrateCheckError):
    """Manifest discovery or parsing failures."""


class ManifestNotFoundError(ManifestError):
    """No package manifest declares the requested name."""

    @classmethod
    def for_package(cls, name: str, root: str) -> "ManifestNotFoundError":
        return cls(
            code=ErrorCode.MANIFEST_NOT_FOUND,
            message=f"Cargo.toml could not be located for {name} in {root}",
            details={"name": name, "root": root},
        )


class ManifestParseError(ManifestError):
    """Manifest is not valid TOML or declares neither package nor workspace."""

    @classmethod
    def invalid(cls, path: str, reason: str) -> "ManifestParseError":
        return cls(
            code=ErrorCode.MANIFEST_PARSE_ERROR,
            message=f"Failed to parse manifest {path}: {reason}",
            details={"path": path, "reason": reason},
        )


class RegistryError(CrateCheckError):
    """crates.io API failures."""

    @classmethod
    def request_failed(cls, url: str, status_code: int) -> "RegistryError":
        return cls(
            code=ErrorCode.REGISTRY_REQUEST_FAILED,
            message=f"http request to crates.io failed: {url} returned {status_code}",
            details={"url": url, "status_code": status_code},
        )

    @classmethod
    def transport(cls, url: str, reason: str) -> "RegistryError":
        return cls(
            code=ErrorCode.REGISTRY_REQUEST_FAILED,
            message=f"http request to crates.io failed: {url}: {reason}",
            retryable=True,
            details={"url": url, "reason": reason},
        )

    @classmethod
    def invalid_body(cls, url: str, reason: str) -> "RegistryError":
        return cls(
            code=ErrorCode.REGISTRY_UNEXPECTED_PAYLOAD,
            message=f"Response from {url} is not a JSON object: {reason}",
            details={"url": url, "reason": reason},
        )

    @classmethod
    def unexpected_payload(cls, url: str, field: str) -> "RegistryError":
        return cls(
            code=ErrorCode.REGISTRY_UNEXPECTED_PAYLOAD,
            message=f"{field} is not an integer in response from {url}",
            details={"url": url, "field": field},
        )


class ReleaseCommitNotFoundError(CrateCheckError):
    """No upstream commit could be identified as the release of a version."""

    @classmethod
    def for_version(cls, name: str, version: str) -> "ReleaseCommitNotFoundError":
        return cls(
            code=ErrorCode.RELEASE_COMMIT_NOT_FOUND,
            message=f"Release commit of {name} {version} could not be found",
            details={"name": name, "version": version},
        )

    @property
    def name(self) -> str:
        return self.details["name"]

    @property
    def version(self) -> str:
        return self.details["version"]


class InternalError(CrateCheckError):
    """Internal/unexpected errors."""

    @classmethod
    def unexpected(cls, reason: str, **details: Any) -> "InternalError":
        return cls(
            code=ErrorCode.INTERNAL_ERROR,
            message=f"Internal error: {reason}",
            details=details,
        )
