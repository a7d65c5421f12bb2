"""Config module exports."""

from cratecheck.config.loader import load_config
from cratecheck.config.models import (
    CrateCheckConfig,
    DiffConfig,
    LoggingConfig,
    RegistryConfig,
    WorkspaceConfig,
)

__all__ = [
    "load_config",
    "CrateCheckConfig",
    "DiffConfig",
    "LoggingConfig",
    "RegistryConfig",
    "WorkspaceConfig",
]
