"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (CRATECHECK__SECTION__KEY)
3. Repo YAML (.cratecheck.yaml in the working directory)
4. Global YAML (~/.config/cratecheck/config.yaml)
5. Built-in defaults (this file)

Environment Variable Format:
    CRATECHECK__<SECTION>__<KEY>=<VALUE>

Examples:
    CRATECHECK__LOGGING__LEVEL=DEBUG
    CRATECHECK__REGISTRY__BASE_URL=https://crates.example.internal
    CRATECHECK__WORKSPACE__BASE_DIR=/var/tmp/cratecheck
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from cratecheck.config.constants import (
    DEFAULT_IGNORE_PATHS,
    DEFAULT_REGISTRY_URL,
    DEFAULT_USER_AGENT,
    MANIFEST_FILENAME,
)

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class LogOutputConfig(BaseModel):
    """Single logging output configuration."""

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        CRATECHECK__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="INFO",
        description="Root log level. DEBUG logs every tag and commit the resolver inspects.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class RegistryConfig(BaseModel):
    """crates.io access.

    Env vars:
        CRATECHECK__REGISTRY__BASE_URL: Registry root (default: https://crates.io)
        CRATECHECK__REGISTRY__USER_AGENT: User-Agent sent with every request
        CRATECHECK__REGISTRY__TIMEOUT_SEC: HTTP timeout for API calls and downloads
    """

    base_url: str = Field(
        default=DEFAULT_REGISTRY_URL,
        description="Registry root. Download URLs are <base_url>/api/v1/crates/<name>/<version>/download.",
    )
    user_agent: str = Field(
        default=DEFAULT_USER_AGENT,
        description="crates.io rejects API requests without a descriptive User-Agent.",
    )
    timeout_sec: float = Field(
        default=60.0,
        description="HTTP timeout. Large crates can take a while to download.",
    )

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"Registry url must be http(s): {v}")
        return v.rstrip("/")

    @field_validator("timeout_sec")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"Timeout must be positive, got {v}")
        return v


class WorkspaceConfig(BaseModel):
    """Scratch directory settings.

    Env vars:
        CRATECHECK__WORKSPACE__BASE_DIR: Parent directory for per-run scratch dirs
    """

    base_dir: str | None = Field(
        default=None,
        description="Parent for scratch directories. Default: the system temp dir. "
        "Clones of large monorepos can need several GB.",
    )


class DiffConfig(BaseModel):
    """Source diff settings.

    Env vars:
        CRATECHECK__DIFF__MANIFEST_FILENAME: Manifest file name (default: Cargo.toml)
    """

    manifest_filename: str = Field(
        default=MANIFEST_FILENAME,
        description="File name the manifest locator and history walk look for.",
    )
    ignore_paths: list[str] = Field(
        default_factory=lambda: list(DEFAULT_IGNORE_PATHS),
        description="Paths rewritten by every publish. Never reported as differences.",
    )


class CrateCheckConfig(BaseModel):
    """Root configuration for cratecheck.

    All settings can be configured via:
    1. Environment variables: CRATECHECK__SECTION__KEY
    2. YAML config files (repo or global)
    3. Direct kwargs to load_config()
    """

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    registry: RegistryConfig = Field(default_factory=RegistryConfig)
    workspace: WorkspaceConfig = Field(default_factory=WorkspaceConfig)
    diff: DiffConfig = Field(default_factory=DiffConfig)
