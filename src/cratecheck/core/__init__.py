"""Core module exports."""

from cratecheck.core.errors import (
    ConfigError,
    CrateCheckError,
    DownloadError,
    ErrorCode,
    ExtractionError,
    ExtractionLayoutError,
    InternalError,
    InvalidRepositoryUrlError,
    ManifestError,
    ManifestNotFoundError,
    ManifestParseError,
    RegistryError,
    ReleaseCommitNotFoundError,
    WorkspaceError,
)
from cratecheck.core.logging import (
    analysis_context,
    clear_request_id,
    configure_logging,
    get_logger,
    get_request_id,
    set_request_id,
)
from cratecheck.core.progress import spinner, status

__all__ = [
    # Errors
    "ConfigError",
    "CrateCheckError",
    "DownloadError",
    "ErrorCode",
    "ExtractionError",
    "ExtractionLayoutError",
    "InternalError",
    "InvalidRepositoryUrlError",
    "ManifestError",
    "ManifestNotFoundError",
    "ManifestParseError",
    "RegistryError",
    "ReleaseCommitNotFoundError",
    "WorkspaceError",
    # Logging
    "analysis_context",
    "clear_request_id",
    "configure_logging",
    "get_logger",
    "get_request_id",
    "set_request_id",
    # Progress
    "spinner",
    "status",
]
