"""
Configuration management for Completed Tasks.

This module handles two kinds of configuration: the plugin settings the user
edits inside the host (task markers, property names, formats), and the local
config.yaml that tells the command-line runner how to reach the host and how
to log. Both fall back to built-in defaults so a missing or broken file never
stops the plugin.
"""

import yaml
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, Field


@dataclass
class SettingSchema:
    """
    Description of one user-editable plugin setting.
    """
    key: str
    type: str
    default: Any
    title: str
    description: str


SETTINGS_SCHEMA: List[SettingSchema] = [
    SettingSchema(
        key="taskMarkers",
        type="string",
        default="DONE, NOW, LATER, DOING, TODO, WAITING, CANCELLED",
        title="Task markers",
        description="Task markers to track when changing the status of tasks."
    ),
    SettingSchema(
        key="taskMarkersComplete",
        type="string",
        default="DONE, CANCELLED",
        title="Task markers 'complete'",
        description="Task markers to add completion date."
    ),
    SettingSchema(
        key="includeDate",
        type="boolean",
        default=True,
        title="Include date?",
        description="Include date when completing tasks."
    ),
    SettingSchema(
        key="completedDateProperty",
        type="string",
        default="completed",
        title="Completed date property",
        description="Property to use for date when marking tasks as completed."
    ),
    SettingSchema(
        key="includeTime",
        type="boolean",
        default=False,
        title="Include time?",
        description="Include time when completing tasks."
    ),
    SettingSchema(
        key="completedTimeProperty",
        type="string",
        default="time",
        title="Completed time property",
        description="Property to use for time when marking tasks as completed."
    ),
    SettingSchema(
        key="timeFormat",
        type="string",
        default="HH:mm",
        title="Time format",
        description="Time format to use when including time. See: https://day.js.org/docs/en/parse/string-format"
    ),
]

MARKER_SETTINGS = ("taskMarkers", "taskMarkersComplete")

_SCHEMA_TYPES = {
    "string": (str,),
    "boolean": (bool,),
}


def default_settings() -> Dict[str, Any]:
    """Get the default value of every plugin setting, keyed by setting key."""
    return {schema.key: schema.default for schema in SETTINGS_SCHEMA}


def normalize_settings(settings: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """
    Fill in missing settings and replace values of the wrong type with defaults.

    Marker settings that are present but null or not a string degrade to "",
    which parses to an empty marker set and leaves the reactor inert.

    Args:
        settings: Raw settings mapping from the host or config file

    Returns:
        A complete settings dictionary
    """
    normalized = default_settings()
    settings = settings or {}

    for schema in SETTINGS_SCHEMA:
        if schema.key not in settings:
            continue

        value = settings[schema.key]
        if schema.key in MARKER_SETTINGS:
            if not isinstance(value, str):
                if value is not None:
                    logging.warning(f"Setting '{schema.key}' should be a string, got {value!r}; tracking no markers")
                value = ""
            normalized[schema.key] = value
            continue

        if value is None:
            continue

        if not isinstance(value, _SCHEMA_TYPES[schema.type]):
            logging.warning(
                f"Setting '{schema.key}' should be a {schema.type}, got {value!r}; using default {schema.default!r}"
            )
            continue

        normalized[schema.key] = value

    return normalized


class CompletionSettings(BaseModel):
    """
    Snapshot of the plugin settings, with host keys mapped to Python names.
    """

    task_markers: str = Field(
        default="DONE, NOW, LATER, DOING, TODO, WAITING, CANCELLED",
        alias="taskMarkers"
    )
    task_markers_complete: str = Field(
        default="DONE, CANCELLED",
        alias="taskMarkersComplete"
    )
    include_date: bool = Field(default=True, alias="includeDate")
    completed_date_property: str = Field(default="completed", alias="completedDateProperty")
    include_time: bool = Field(default=False, alias="includeTime")
    completed_time_property: str = Field(default="time", alias="completedTimeProperty")
    time_format: str = Field(default="HH:mm", alias="timeFormat")

    @classmethod
    def from_mapping(cls, settings: Optional[Mapping[str, Any]]) -> "CompletionSettings":
        """
        Build a settings snapshot from a host settings mapping.

        Args:
            settings: Mapping keyed by the host setting keys (e.g. 'includeDate')

        Returns:
            A validated CompletionSettings
        """
        return cls.model_validate(normalize_settings(settings))

    def to_mapping(self) -> Dict[str, Any]:
        """Get the settings back in host key form."""
        return self.model_dump(by_alias=True)


class ConfigManager:
    """
    Manages configuration loading and access for Completed Tasks.
    """

    def __init__(self, config_path: str = "config.yaml"):
        """
        Initialize the configuration manager.

        Args:
            config_path: Path to the configuration file
        """
        self.config_path = Path(config_path)
        self._config: Dict[str, Any] = {}
        self._load_config()

    def _load_config(self) -> None:
        """Load configuration from YAML file."""
        try:
            if not self.config_path.exists():
                raise FileNotFoundError(f"Configuration file not found: {self.config_path}")

            with open(self.config_path, 'r', encoding='utf-8') as f:
                self._config = yaml.safe_load(f) or {}

            if not isinstance(self._config, dict):
                raise ValueError(f"Configuration root must be a mapping, got {type(self._config).__name__}")

            logging.info(f"Configuration loaded from {self.config_path}")

        except Exception as e:
            logging.error(f"Failed to load configuration: {e}")
            # Fall back to default configuration
            self._config = self._get_default_config()

    def _get_default_config(self) -> Dict[str, Any]:
        """Get default configuration values as fallback."""
        return {
            "logseq": {
                "api_url": "http://127.0.0.1:12315",
                "api_token": "",
                "timeout": 10.0
            },
            "settings": default_settings(),
            "logging": {
                "level": "INFO",
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                "file": "completed_tasks.log"
            }
        }

    def get(self, key_path: str, default: Any = None) -> Any:
        """
        Get a configuration value using dot notation.

        Args:
            key_path: Dot-separated path to the configuration value (e.g., "logseq.api_url")
            default: Default value if key is not found

        Returns:
            The configuration value

        Examples:
            config.get("logseq.timeout")  # Returns 10.0
            config.get("settings.includeDate")  # Returns True
        """
        keys = key_path.split('.')
        value = self._config

        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default

        return value

    def get_section(self, section: str) -> Dict[str, Any]:
        """
        Get an entire configuration section.

        Args:
            section: Name of the configuration section

        Returns:
            Dictionary containing the section configuration
        """
        return self._config.get(section) or {}

    def reload(self) -> None:
        """Reload configuration from file."""
        self._load_config()

    # Convenience properties for commonly used values

    @property
    def api_url(self) -> str:
        """Get the host HTTP API base URL."""
        return str(self.get("logseq.api_url", "http://127.0.0.1:12315")).rstrip("/")

    @property
    def api_token(self) -> str:
        """Get the host HTTP API token."""
        return self.get("logseq.api_token", "") or ""

    @property
    def api_timeout(self) -> float:
        """Get the host HTTP API timeout."""
        return float(self.get("logseq.timeout", 10.0))

    @property
    def log_level(self) -> str:
        return str(self.get("logging.level", "INFO"))

    @property
    def log_format(self) -> str:
        return self.get("logging.format", "%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    @property
    def log_filename(self) -> Optional[str]:
        """Get log file name; empty disables file logging."""
        return self.get("logging.file", "completed_tasks.log") or None

    @property
    def plugin_settings(self) -> Dict[str, Any]:
        """Get the plugin settings, completed with defaults."""
        return normalize_settings(self.get_section("settings"))


# Global configuration instance
config = ConfigManager()


def get_config() -> ConfigManager:
    """
    Get the global configuration instance.

    Returns:
        The global ConfigManager instance
    """
    return config
