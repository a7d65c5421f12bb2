"""Tests for config/loader.py module.

Covers:
- _load_yaml() function
- _deep_merge() function
- load_config() precedence and validation
"""

from __future__ import annotations

from pathlib import Path

import pytest

from cratecheck.config.constants import DEFAULT_IGNORE_PATHS
from cratecheck.config.loader import LOCAL_CONFIG_NAME, _deep_merge, _load_yaml, load_config
from cratecheck.core.errors import ConfigError


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for var in ("CRATECHECK__LOGGING__LEVEL", "CRATECHECK__REGISTRY__TIMEOUT_SEC", "CRATECHECK__REGISTRY__BASE_URL"):
        monkeypatch.delenv(var, raising=False)


class TestLoadYaml:
    """Tests for _load_yaml function."""

    def test_returns_empty_dict_for_missing_file(self, tmp_path: Path) -> None:
        assert _load_yaml(tmp_path / "nonexistent.yaml") == {}

    def test_loads_valid_yaml(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / "config.yaml"
        yaml_file.write_text("registry:\n  timeout_sec: 5\n")

        assert _load_yaml(yaml_file) == {"registry": {"timeout_sec": 5}}

    def test_returns_empty_for_yaml_null(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / "null.yaml"
        yaml_file.write_text("null\n")

        assert _load_yaml(yaml_file) == {}

    def test_raises_config_error_for_invalid_yaml(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / "invalid.yaml"
        yaml_file.write_text("logging:\n  level:\n    - invalid: [unclosed")

        with pytest.raises(ConfigError):
            _load_yaml(yaml_file)

    def test_raises_config_error_for_non_mapping(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / "list.yaml"
        yaml_file.write_text("- a\n- b\n")

        with pytest.raises(ConfigError):
            _load_yaml(yaml_file)


class TestDeepMerge:
    """Tests for _deep_merge function."""

    def test_nested_merge(self) -> None:
        base = {"registry": {"base_url": "https://a", "timeout_sec": 1}}
        override = {"registry": {"timeout_sec": 2}}

        assert _deep_merge(base, override) == {"registry": {"base_url": "https://a", "timeout_sec": 2}}

    def test_does_not_mutate_base(self) -> None:
        base = {"a": {"b": 1}}
        _deep_merge(base, {"a": {"b": 2}})
        assert base == {"a": {"b": 1}}


class TestLoadConfig:
    """Tests for load_config function."""

    def test_defaults(self, tmp_path: Path) -> None:
        config = load_config(tmp_path, global_path=tmp_path / "missing.yaml")

        assert config.registry.base_url == "https://crates.io"
        assert config.workspace.base_dir is None
        assert config.diff.manifest_filename == "Cargo.toml"
        assert config.diff.ignore_paths == list(DEFAULT_IGNORE_PATHS)

    def test_local_overrides_global(self, tmp_path: Path) -> None:
        global_file = tmp_path / "global.yaml"
        global_file.write_text("registry:\n  timeout_sec: 10\n  user_agent: global-agent\n")
        (tmp_path / LOCAL_CONFIG_NAME).write_text("registry:\n  timeout_sec: 20\n")

        config = load_config(tmp_path, global_path=global_file)

        assert config.registry.timeout_sec == 20
        assert config.registry.user_agent == "global-agent"

    def test_env_vars_override_yaml(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / LOCAL_CONFIG_NAME).write_text("logging:\n  level: INFO\n")
        monkeypatch.setenv("CRATECHECK__LOGGING__LEVEL", "DEBUG")

        config = load_config(tmp_path, global_path=tmp_path / "missing.yaml")

        assert config.logging.level == "DEBUG"

    def test_kwargs_override_all(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CRATECHECK__REGISTRY__TIMEOUT_SEC", "5")

        config = load_config(
            tmp_path, global_path=tmp_path / "missing.yaml", registry={"timeout_sec": 99}
        )

        assert config.registry.timeout_sec == 99

    def test_ignore_paths_from_yaml(self, tmp_path: Path) -> None:
        (tmp_path / LOCAL_CONFIG_NAME).write_text("diff:\n  ignore_paths: [Cargo.lock]\n")

        config = load_config(tmp_path, global_path=tmp_path / "missing.yaml")

        assert config.diff.ignore_paths == ["Cargo.lock"]

    def test_raises_config_error_for_invalid_value(self, tmp_path: Path) -> None:
        (tmp_path / LOCAL_CONFIG_NAME).write_text("registry:\n  timeout_sec: -1\n")

        with pytest.raises(ConfigError) as exc_info:
            load_config(tmp_path, global_path=tmp_path / "missing.yaml")

        assert "registry.timeout_sec" in exc_info.value.message
