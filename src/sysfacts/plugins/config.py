"""Configuration models and utilities.

This module provides Pydantic models for validating and loading sysfacts
configuration from YAML files, with support for environment variable expansion.

Models:
    - FactsSettings: Root configuration model

Functions:
    - expand_env_vars: Expand ${VAR} patterns in strings
    - expand_env_vars_in_dict: Recursively expand env vars in nested dicts
    - load_settings: Load and validate settings from a YAML file
"""

import os
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator

LOG_LEVELS = ("debug", "info", "warning", "error", "critical")


class FactsSettings(BaseModel):
    """Root configuration model for sysfacts.

    The engine treats these settings as read-only.

    Attributes:
        version: Configuration schema version.
        plugin_path: Ordered list of plugin directories. Earlier entries win
            when the same plugin name exists in several directories.
        disabled_plugins: Plugin names that require_plugin() refuses to run.
        hints_path: Ordered list of directories searched for hint files.
        os: Override for the host OS identifier (detected when unset).
        safe: Whether provider errors are caught during collection runs.
        log_level: Minimum level for log output.
    """

    version: str = "1"
    plugin_path: list[Path] = Field(default_factory=list)
    disabled_plugins: set[str] = Field(default_factory=set)
    hints_path: list[Path] = Field(default_factory=list)
    os: str | None = None
    safe: bool = True
    log_level: str = "info"

    @field_validator("plugin_path", "hints_path", mode="after")
    @classmethod
    def _expand_user(cls, value: list[Path]) -> list[Path]:
        return [path.expanduser() for path in value]

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        value = value.lower()
        if value not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        return value


# Environment variable expansion pattern: ${VAR_NAME}
_ENV_VAR_PATTERN = re.compile(r"\$\{([^}]+)\}")


def expand_env_vars(value: str) -> str:
    """Expand ${VAR} patterns with environment variables.

    Args:
        value: String potentially containing ${VAR} patterns.

    Returns:
        String with all ${VAR} patterns replaced with environment variable values.

    Raises:
        ValueError: If a referenced environment variable is not set.

    Example:
        >>> os.environ["FACTS_HOME"] = "/opt/facts"
        >>> expand_env_vars("${FACTS_HOME}/plugins")
        "/opt/facts/plugins"
    """

    def replacer(match: re.Match[str]) -> str:
        var_name = match.group(1)
        env_value = os.environ.get(var_name)
        if env_value is None:
            raise ValueError(f"Environment variable '{var_name}' not set")
        return env_value

    return _ENV_VAR_PATTERN.sub(replacer, value)


def expand_env_vars_in_dict(data: dict[str, Any]) -> dict[str, Any]:
    """Recursively expand environment variables in a nested dictionary.

    Args:
        data: Dictionary potentially containing ${VAR} patterns in string values.

    Returns:
        New dictionary with all ${VAR} patterns expanded.

    Raises:
        ValueError: If a referenced environment variable is not set.
    """
    result: dict[str, Any] = {}

    for key, value in data.items():
        if isinstance(value, str):
            result[key] = expand_env_vars(value)
        elif isinstance(value, dict):
            result[key] = expand_env_vars_in_dict(value)
        elif isinstance(value, list):
            result[key] = [
                expand_env_vars(item) if isinstance(item, str) else item
                for item in value
            ]
        else:
            result[key] = value

    return result


def load_settings(path: str | Path) -> FactsSettings:
    """Load and validate settings from a YAML file.

    Performs environment variable expansion on all string values before
    validation. Relative plugin and hint directories are resolved against
    the directory containing the settings file.

    Args:
        path: Path to the settings.yml file.

    Returns:
        Validated FactsSettings instance.

    Raises:
        FileNotFoundError: If the settings file does not exist.
        yaml.YAMLError: If the file contains invalid YAML.
        pydantic.ValidationError: If the configuration is invalid.
        ValueError: If environment variable expansion fails.

    Example:
        >>> settings = load_settings("/etc/sysfacts/settings.yml")
        >>> settings.plugin_path
        [PosixPath('/etc/sysfacts/plugins')]
    """
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Settings file not found: {path}")

    with path.open() as f:
        data = yaml.safe_load(f)

    # Handle empty file
    if data is None:
        data = {}

    data = expand_env_vars_in_dict(data)
    settings = FactsSettings.model_validate(data)

    base_dir = path.parent
    settings.plugin_path = [base_dir / p for p in settings.plugin_path]
    settings.hints_path = [base_dir / p for p in settings.hints_path]
    return settings
