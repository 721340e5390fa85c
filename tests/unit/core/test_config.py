"""Unit tests for engine configuration.

Tests for EngineConfig validation and TOML load/save.
"""

import tomllib
from pathlib import Path
from unittest.mock import patch

import pytest
from forcedel.core.config import (
    DEFAULT_FORCE_TIMEOUT,
    ConfigError,
    ConfigParseError,
    EngineConfig,
    load_config,
    save_config,
)
from pydantic import ValidationError


class TestEngineConfig:
    """Tests for EngineConfig model."""

    def test_defaults(self) -> None:
        """Defaults enable normalization, fallback and recording."""
        config = EngineConfig()

        assert config.normalize is True
        assert config.force_fallback is True
        assert config.force_command is None
        assert config.force_timeout_seconds == DEFAULT_FORCE_TIMEOUT
        assert config.audit_log is True
        assert config.record_history is True

    def test_custom_command_accepted(self) -> None:
        """A command containing the path placeholder is valid."""
        config = EngineConfig(force_command=["doas", "rm", "-f", "{path}"])
        assert config.force_command == ["doas", "rm", "-f", "{path}"]

    def test_command_without_placeholder_rejected(self) -> None:
        """A command that cannot receive the path is rejected."""
        with pytest.raises(ValidationError, match="placeholder"):
            EngineConfig(force_command=["doas", "rm", "-f"])

    @pytest.mark.parametrize("command", [[], ["  ", "{path}"]])
    def test_empty_command_rejected(self, command: list[str]) -> None:
        """An empty command or executable is rejected."""
        with pytest.raises(ValidationError, match="cannot be empty"):
            EngineConfig(force_command=command)

    @pytest.mark.parametrize("timeout", [0, 3601])
    def test_timeout_bounds(self, timeout: int) -> None:
        """The forced-removal timeout must be within 1..3600 seconds."""
        with pytest.raises(ValidationError):
            EngineConfig(force_timeout_seconds=timeout)

    def test_extra_fields_forbidden(self) -> None:
        """Unknown keys are rejected."""
        with pytest.raises(ValidationError):
            EngineConfig(recursive=False)  # type: ignore[call-arg]


class TestLoadConfig:
    """Tests for load_config function."""

    def test_missing_file_returns_defaults(self, tmp_path: Path) -> None:
        """A missing config file is not an error."""
        assert load_config(tmp_path / "config.toml") == EngineConfig()

    def test_default_path_used(self, tmp_path: Path) -> None:
        """Without a path the XDG config path is read."""
        config_path = tmp_path / "config.toml"
        config_path.write_text("force_fallback = false\n")

        with patch("forcedel.core.config.get_config_path", return_value=config_path):
            config = load_config()

        assert config.force_fallback is False

    def test_loads_values(self, tmp_path: Path) -> None:
        """Values from the file override defaults."""
        config_path = tmp_path / "config.toml"
        config_path.write_text(
            'force_command = ["doas", "rm", "{path}"]\nforce_timeout_seconds = 30\naudit_log = false\n'
        )

        config = load_config(config_path)

        assert config.force_command == ["doas", "rm", "{path}"]
        assert config.force_timeout_seconds == 30
        assert config.audit_log is False
        assert config.normalize is True

    def test_invalid_toml_raises_parse_error(self, tmp_path: Path) -> None:
        """Malformed TOML raises ConfigParseError."""
        config_path = tmp_path / "config.toml"
        config_path.write_text("normalize = [")

        with pytest.raises(ConfigParseError, match="Invalid TOML syntax"):
            load_config(config_path)

    def test_invalid_content_raises_config_error(self, tmp_path: Path) -> None:
        """Schema violations raise ConfigError."""
        config_path = tmp_path / "config.toml"
        config_path.write_text("force_timeout_seconds = 0\n")

        with pytest.raises(ConfigError, match="Invalid config content"):
            load_config(config_path)


class TestSaveConfig:
    """Tests for save_config function."""

    def test_roundtrip(self, tmp_path: Path) -> None:
        """A saved config loads back unchanged."""
        config = EngineConfig(force_command=["doas", "rm", "{path}"], record_history=False)
        config_path = tmp_path / "nested" / "config.toml"

        saved = save_config(config, config_path)

        assert saved == config_path
        assert load_config(config_path) == config

    def test_unset_command_omitted(self, tmp_path: Path) -> None:
        """TOML has no null, so an unset command is left out."""
        config_path = save_config(EngineConfig(), tmp_path / "config.toml")

        with open(config_path, "rb") as f:
            data = tomllib.load(f)

        assert "force_command" not in data
        assert data["force_timeout_seconds"] == DEFAULT_FORCE_TIMEOUT

    def test_no_temp_files_left(self, tmp_path: Path) -> None:
        """The atomic write leaves only the config file."""
        save_config(EngineConfig(), tmp_path / "config.toml")

        assert [p.name for p in tmp_path.iterdir()] == ["config.toml"]

    def test_write_failure_raises_config_error(self, tmp_path: Path) -> None:
        """OS errors while writing become ConfigError."""
        with (
            patch("forcedel.core.config.os.replace", side_effect=OSError("disk full")),
            pytest.raises(ConfigError, match="Failed to write config"),
        ):
            save_config(EngineConfig(), tmp_path / "config.toml")

        assert list(tmp_path.iterdir()) == []
