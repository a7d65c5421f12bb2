"""Configuration loading.

Sources, highest precedence first:

1. keyword arguments to ``load_config()``
2. ``CRATECHECK__SECTION__KEY`` environment variables
3. ``.cratecheck.yaml`` in the working directory
4. ``~/.config/cratecheck/config.yaml``
5. defaults from ``cratecheck.config.models``

Sections merge key by key, so a repo file that only sets
``registry.timeout_sec`` keeps the global ``registry.user_agent``.
"""

from contextvars import ContextVar
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from cratecheck.config.models import (
    CrateCheckConfig,
    DiffConfig,
    LoggingConfig,
    RegistryConfig,
    WorkspaceConfig,
)
from cratecheck.core.errors import ConfigError

GLOBAL_CONFIG_PATH = Path("~/.config/cratecheck/config.yaml").expanduser()
LOCAL_CONFIG_NAME = ".cratecheck.yaml"

# Merged YAML for the load_config() call in progress
_file_layer: ContextVar[dict[str, Any]] = ContextVar("file_layer", default={})


def _load_yaml(path: Path) -> dict[str, Any]:
    """Mapping stored in ``path``; empty when the file is missing or blank."""
    if not path.exists():
        return {}
    try:
        data = yaml.safe_load(path.read_text())
    except yaml.YAMLError as e:
        raise ConfigError.parse_error(str(path), str(e)) from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError.parse_error(str(path), "top level must be a mapping")
    return data


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """``override`` on top of ``base``, merging nested mappings. Inputs are not modified."""
    merged = dict(base)
    for key, value in override.items():
        below = merged.get(key)
        merged[key] = _deep_merge(below, value) if isinstance(below, dict) and isinstance(value, dict) else value
    return merged


class _FileLayerSource(PydanticBaseSettingsSource):
    """Serves the merged YAML files of the current load."""

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:  # noqa: ARG002
        value = _file_layer.get().get(field_name)
        return value, field_name, value is not None

    def __call__(self) -> dict[str, Any]:
        return dict(_file_layer.get())


class _Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="CRATECHECK__",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    logging: LoggingConfig = LoggingConfig()
    registry: RegistryConfig = RegistryConfig()
    workspace: WorkspaceConfig = WorkspaceConfig()
    diff: DiffConfig = DiffConfig()

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,  # noqa: ARG003
        file_secret_settings: PydanticBaseSettingsSource,  # noqa: ARG003
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (init_settings, env_settings, _FileLayerSource(settings_cls))


def _first_problem(error: ValidationError) -> ConfigError:
    problem = error.errors()[0]
    where = ".".join(str(part) for part in problem["loc"])
    return ConfigError.invalid_value(where, problem.get("input"), problem["msg"])


def load_config(
    cwd: Path | None = None,
    *,
    global_path: Path | None = None,
    **overrides: Any,
) -> CrateCheckConfig:
    """Resolve the configuration for a run.

    Args:
        cwd: Directory searched for ``.cratecheck.yaml`` (default: current directory).
        global_path: Replaces ``~/.config/cratecheck/config.yaml``.
        **overrides: Section mappings, e.g. ``registry={"timeout_sec": 5}``.

    Raises:
        ConfigError: a file is not valid YAML, or a value fails validation.
    """
    files = _deep_merge(
        _load_yaml(global_path or GLOBAL_CONFIG_PATH),
        _load_yaml((cwd or Path.cwd()) / LOCAL_CONFIG_NAME),
    )
    token = _file_layer.set(files)
    try:
        settings = _Settings(**overrides)
    except ValidationError as e:
        raise _first_problem(e) from e
    finally:
        _file_layer.reset(token)
    return CrateCheckConfig.model_validate(settings.model_dump())
