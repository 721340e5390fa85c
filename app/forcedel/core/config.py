"""Engine configuration and settings.

This module provides the configuration model and I/O functions for the
deletion engine: whether to normalize permissions, whether and how to
fall back to a forced external removal, and what to record.

Configuration is stored in ~/.config/forcedel/config.toml
"""

import logging
import os
import tomllib
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Annotated

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from forcedel.core.paths import get_config_path

logger = logging.getLogger(__name__)

# Placeholder substituted with the target path in force_command
PATH_PLACEHOLDER = "{path}"

DEFAULT_FORCE_TIMEOUT = 120


class EngineConfig(BaseModel):
    """Configuration for the deletion engine.

    Attributes:
        normalize: Strip read-only/hidden/system flags and grant delete
            access before each removal attempt.
        force_fallback: Invoke the forced-removal command when direct
            removal fails.
        force_command: Command template for forced removal. Must contain
            the ``{path}`` placeholder. None selects the host default.
        force_timeout_seconds: Maximum time to wait for one forced removal.
        audit_log: Write per-entry audit lines to the state directory.
        record_history: Append a summary of each run to the history file.
    """

    model_config = ConfigDict(extra="forbid")

    normalize: Annotated[
        bool,
        Field(description="Clear blocking attributes/ACLs before deleting"),
    ] = True
    force_fallback: Annotated[
        bool,
        Field(description="Fall back to a forced external removal command"),
    ] = True
    force_command: Annotated[
        list[str] | None,
        Field(description="Forced removal command template (None = host default)"),
    ] = None
    force_timeout_seconds: Annotated[
        int,
        Field(ge=1, le=3600, description="Forced removal timeout in seconds (1-3600)"),
    ] = DEFAULT_FORCE_TIMEOUT
    audit_log: Annotated[
        bool,
        Field(description="Write the per-entry audit log"),
    ] = True
    record_history: Annotated[
        bool,
        Field(description="Record each run to the history file"),
    ] = True

    @field_validator("force_command")
    @classmethod
    def validate_force_command(cls, v: list[str] | None) -> list[str] | None:
        """Validate that a custom command is non-empty and takes the path."""
        if v is None:
            return v
        if not v or not v[0].strip():
            msg = "force_command cannot be empty"
            raise ValueError(msg)
        if not any(PATH_PLACEHOLDER in arg for arg in v):
            msg = f"force_command must contain the {PATH_PLACEHOLDER} placeholder"
            raise ValueError(msg)
        return v


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigParseError(ConfigError):
    """Raised when the config file cannot be parsed."""


def load_config(path: Path | None = None) -> EngineConfig:
    """Load engine configuration from a TOML file.

    A missing file is not an error: defaults are returned.

    Args:
        path: Path to the config file. If None, uses the default config path.

    Returns:
        Validated EngineConfig object.

    Raises:
        ConfigParseError: If the TOML syntax is invalid.
        ConfigError: If the file cannot be read or the content doesn't match the schema.
    """
    config_path = path or get_config_path()

    if not config_path.exists():
        logger.debug("No config file at %s, using defaults", config_path)
        return EngineConfig()

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(f"Invalid TOML syntax in {config_path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read config {config_path}: {e}") from e

    try:
        return EngineConfig.model_validate(data)
    except (ValueError, ValidationError) as e:
        raise ConfigError(f"Invalid config content in {config_path}: {e}") from e


def save_config(config: EngineConfig, path: Path | None = None) -> Path:
    """Save engine configuration to a TOML file.

    The file is written atomically by first writing to a temporary file
    and then using os.replace() for atomic rename.

    Args:
        config: The EngineConfig object to save.
        path: Path to save the config. If None, uses the default config path.

    Returns:
        Path where the config was saved.

    Raises:
        ConfigError: If the file cannot be written.
    """
    config_path = path or get_config_path()

    data = _config_to_dict(config)

    tmp_path: Path | None = None
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with NamedTemporaryFile(
            mode="wb",
            dir=config_path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(data, f)
        os.replace(str(tmp_path), str(config_path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise ConfigError(f"Failed to write config: {e}") from e

    return config_path


def _config_to_dict(config: EngineConfig) -> dict[str, object]:
    """Convert EngineConfig to a dictionary for TOML serialization.

    TOML has no null, so an unset force_command is omitted.

    Args:
        config: The EngineConfig to convert.

    Returns:
        Dictionary ready for TOML serialization.
    """
    return config.model_dump(exclude_none=True)
