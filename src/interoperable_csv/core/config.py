"""
Configuration module for the iCSV engine.

Loads optional settings from a JSON file and environment variables.
"""

import json
import os
from typing import Dict, Any, Optional
from pathlib import Path

from . import constants


class Config:
    """Configuration manager for readers, writers and the command line."""

    def __init__(self, config_file: Optional[str] = None):
        """
        Initialize configuration.

        Args:
            config_file: Path to configuration JSON file. If None, uses ICSV_CONFIG_FILE
                        env var; without either, built-in defaults are used
        """
        self.config_file = config_file or os.getenv("ICSV_CONFIG_FILE")
        self.config: Dict[str, Any] = {}
        self._load_config()
        self._override_from_env()
        self._validate_config()

    def _load_config(self) -> None:
        """Load configuration from JSON file."""
        if not self.config_file:
            return

        config_path = Path(self.config_file)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {self.config_file}")

        with open(config_path, "r", encoding="utf-8") as f:
            self.config = json.load(f)

    def _set(self, section: str, key: str, value: Any) -> None:
        self.config.setdefault(section, {})[key] = value

    def _override_from_env(self) -> None:
        """Override configuration with environment variables."""
        if os.getenv("ICSV_DATE_FORMAT"):
            self._set("reader", "date_format", os.getenv("ICSV_DATE_FORMAT"))

        if os.getenv("ICSV_OUT_DATE_FORMAT"):
            self._set("writer", "date_format", os.getenv("ICSV_OUT_DATE_FORMAT"))

        if os.getenv("ICSV_FIELD_DELIMITER"):
            self._set("writer", "field_delimiter", os.getenv("ICSV_FIELD_DELIMITER"))

        if os.getenv("ICSV_LOG_LEVEL"):
            self._set("logging", "level", os.getenv("ICSV_LOG_LEVEL"))

        if os.getenv("ICSV_LOG_FILE"):
            self._set("logging", "file", os.getenv("ICSV_LOG_FILE"))

    def _validate_config(self) -> None:
        """Validate that configured values have usable types."""
        errors = []

        for key in ("reader.date_format", "writer.date_format", "logging.level"):
            value = self.get(key)
            if value is not None and not isinstance(value, str):
                errors.append(f"{key} must be a string")

        delimiter = self.get("writer.field_delimiter")
        if delimiter is not None and (not isinstance(delimiter, str) or not delimiter):
            errors.append("writer.field_delimiter must be a non-empty string")

        if errors:
            raise ValueError(f"Invalid configuration: {'; '.join(errors)}")

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value by key (supports dot notation).

        Args:
            key: Configuration key (e.g., 'reader.date_format')
            default: Default value if key not found

        Returns:
            Configuration value
        """
        keys = key.split(".")
        value = self.config

        for k in keys:
            if isinstance(value, dict):
                value = value.get(k)
                if value is None:
                    return default
            else:
                return default

        return value

    @property
    def date_format(self) -> str:
        """Format used to parse [DATE=...] markers."""
        return self.get("reader.date_format", constants.DEFAULT_DATE_FORMAT)

    @property
    def out_date_format(self) -> str:
        """Format used to render [DATE=...] markers."""
        return self.get("writer.date_format", constants.DEFAULT_DATE_FORMAT)

    @property
    def field_delimiter(self) -> str:
        """Default delimiter for appended blocks."""
        return self.get("writer.field_delimiter", ",")

    @property
    def log_level(self) -> str:
        """Get logging level."""
        return self.get("logging.level", "INFO")

    @property
    def log_file(self) -> Optional[str]:
        """Get log file path."""
        return self.get("logging.file")

    def __repr__(self) -> str:
        return f"Config(file={self.config_file!r}, date_format={self.date_format!r})"
