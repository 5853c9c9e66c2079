"""
Configuration schema and loading for archivestore.

Uses Pydantic for validation and Dynaconf for multi-source loading.
Settings are frozen (immutable) after construction.

Drivers never hold settings objects. They receive a ConfigAccessor and
look values up on every operation, so a changed storage path takes
effect without restarting the host.
"""

import os
import re
from collections.abc import Mapping, MutableMapping
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, ValidationError, field_validator

from archivestore.contracts.errors import ConfigurationError

__all__ = [
    "ArchiveStoreSettings",
    "DriverSettings",
    "LoggingSettings",
    "MappingConfigAccessor",
    "SettingsFileConfigAccessor",
    "load_settings",
]


class DriverSettings(BaseModel):
    """Per-driver configuration surface: an enable toggle and a storage path."""

    model_config = {"frozen": True, "extra": "forbid"}

    enabled: bool = Field(default=True, description="Whether the pipeline may use this driver")
    # NOTE: str instead of Path - remote backends may use URIs here
    storage_path: str | None = Field(
        default=None,
        description="Root under which the driver places content",
    )

    @field_validator("storage_path")
    @classmethod
    def validate_storage_path_not_blank(cls, v: str | None) -> str | None:
        """Reject whitespace-only paths; leave None to mean unset."""
        if v is not None and not v.strip():
            raise ValueError("storage_path cannot be blank")
        return v


class LoggingSettings(BaseModel):
    """Logging output configuration."""

    model_config = {"frozen": True, "extra": "forbid"}

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    json_output: bool = False


class ArchiveStoreSettings(BaseModel):
    """Top-level archivestore configuration.

    Example YAML:
        drivers:
          localdir:
            enabled: true
            storage_path: /var/archive
        logging:
          level: INFO
    """

    model_config = {"frozen": True, "extra": "forbid"}

    drivers: dict[str, DriverSettings] = Field(
        default_factory=dict,
        description="Driver settings keyed by plugin name",
    )
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


# Regex pattern for ${VAR} or ${VAR:-default} syntax
_ENV_VAR_PATTERN = re.compile(r"\$\{([A-Z_][A-Z0-9_]*)(?::-([^}]*))?\}")


def _expand_env_vars(config: dict[str, Any]) -> dict[str, Any]:
    """Recursively expand ${VAR} and ${VAR:-default} patterns in config values."""

    def _expand_string(value: str) -> str:
        def replacer(match: re.Match[str]) -> str:
            env_value = os.environ.get(match.group(1))
            if env_value is not None:
                return env_value
            if match.group(2) is not None:
                return match.group(2)
            # No env var and no default - keep original
            return match.group(0)

        return _ENV_VAR_PATTERN.sub(replacer, value)

    def _expand_value(value: Any) -> Any:
        if isinstance(value, str):
            return _expand_string(value)
        elif isinstance(value, dict):
            return {k: _expand_value(v) for k, v in value.items()}
        elif isinstance(value, list):
            return [_expand_value(item) for item in value]
        else:
            return value

    return {k: _expand_value(v) for k, v in config.items()}


def _lower_keys(value: Any) -> Any:
    """Lowercase mapping keys recursively (env overrides arrive uppercase)."""
    if isinstance(value, dict):
        return {str(k).lower(): _lower_keys(v) for k, v in value.items()}
    return value


def load_settings(config_path: Path) -> ArchiveStoreSettings:
    """Load settings from YAML file with environment variable overrides.

    Uses Dynaconf for multi-source loading with precedence:
    1. Environment variables (ARCHIVESTORE_*) - highest priority
    2. Config file (settings.yaml)
    3. Defaults from Pydantic schema - lowest priority

    Environment variable format: ARCHIVESTORE_DRIVERS__LOCALDIR__STORAGE_PATH
    for nested keys.

    Args:
        config_path: Path to YAML configuration file

    Returns:
        Validated ArchiveStoreSettings instance

    Raises:
        ValidationError: If configuration fails Pydantic validation
        FileNotFoundError: If config file doesn't exist
    """
    from dynaconf import Dynaconf

    # Explicit check for file existence (Dynaconf silently accepts missing files)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    dynaconf_settings = Dynaconf(
        envvar_prefix="ARCHIVESTORE",
        settings_files=[str(config_path)],
        environments=False,
        load_dotenv=False,
        merge_enabled=True,
    )

    internal_keys = {"LOAD_DOTENV", "ENVIRONMENTS", "SETTINGS_FILES"}
    raw_config = _lower_keys({k: v for k, v in dynaconf_settings.as_dict().items() if k not in internal_keys})
    raw_config = _expand_env_vars(raw_config)

    return ArchiveStoreSettings(**raw_config)


class MappingConfigAccessor:
    """ConfigAccessor over a live mapping of plugin name -> settings dict.

    Lookups go to the mapping on every call, so mutating it (or the dict
    for one plugin) is observed by the next driver operation.
    """

    def __init__(self, values: MutableMapping[str, MutableMapping[str, Any]] | None = None) -> None:
        self._values: MutableMapping[str, MutableMapping[str, Any]] = values if values is not None else {}

    @classmethod
    def from_settings(cls, settings: ArchiveStoreSettings) -> "MappingConfigAccessor":
        """Snapshot validated settings into a mutable accessor."""
        return cls({name: driver.model_dump() for name, driver in settings.drivers.items()})

    def get(self, plugin_name: str, key: str) -> Any:
        plugin_values: Mapping[str, Any] = self._values.get(plugin_name, {})
        return plugin_values.get(key)

    def set(self, plugin_name: str, key: str, value: Any) -> None:
        """Set a value for one plugin, creating its section if needed."""
        self._values.setdefault(plugin_name, {})[key] = value


class SettingsFileConfigAccessor:
    """ConfigAccessor that re-reads a settings file on every lookup.

    Raises:
        ConfigurationError: From ``get`` when the file is missing or invalid
    """

    def __init__(self, config_path: Path) -> None:
        self._config_path = config_path

    @property
    def config_path(self) -> Path:
        return self._config_path

    def get(self, plugin_name: str, key: str) -> Any:
        try:
            settings = load_settings(self._config_path)
        except FileNotFoundError as e:
            raise ConfigurationError(str(e), backend=plugin_name) from e
        except ValidationError as e:
            raise ConfigurationError(f"Invalid settings in {self._config_path}: {e}", backend=plugin_name) from e

        driver = settings.drivers.get(plugin_name)
        if driver is None:
            return None
        return driver.model_dump().get(key)
