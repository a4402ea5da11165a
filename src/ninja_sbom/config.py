# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""Configuration loading and validation for ninja_sbom."""

import logging
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from ninja_sbom.errors import NinjaSbomError
from ninja_sbom.registry import SelfDependencyPolicy

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILENAME = ".ninja_sbom.yml"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ConfigurationError(NinjaSbomError):
    """Raised when configuration validation fails critically."""

    pass


class Config:
    """Configuration for build graph extraction.

    Loads configuration from .ninja_sbom.yml with validation and defaults.
    """

    DEFAULTS = {
        "document_name": "extracted",
        "collapse_implicit_inputs": False,
        "self_dependency_policy": SelfDependencyPolicy.IGNORE,
        "skip_blank_lines": True,
        "log_level": "INFO",
        "log_dir": ".ninja_sbom_logs",
    }

    def __init__(
        self,
        config_path: Optional[Path] = None,
        values: Optional[Dict[str, Any]] = None,
    ):
        """Initialize configuration.

        Args:
            config_path: Path to configuration file. If None, uses default location.
            values: In-memory values used instead of a file. Unlike file
                values, invalid entries raise instead of falling back to defaults.

        Raises:
            ConfigurationError: If values has an unknown key or invalid value.
        """
        self._config: Dict[str, Any] = {}
        self.config_path: Optional[Path] = None

        if values is not None:
            self._apply_values(values)
            return

        if config_path is None:
            config_path = Path.cwd() / DEFAULT_CONFIG_FILENAME
        self.config_path = config_path
        self._load_config()

    @classmethod
    def from_dict(cls, values: Dict[str, Any]) -> "Config":
        """Build a configuration from in-memory values instead of a file.

        Raises:
            ConfigurationError: If a key is unknown or a value is invalid.
        """
        return cls(values=values)

    def _apply_values(self, values: Dict[str, Any]) -> None:
        """Merge in-memory values over defaults, rejecting invalid entries."""
        self._config = self.DEFAULTS.copy()
        for key, value in values.items():
            if key not in self.DEFAULTS:
                raise ConfigurationError(f"Unknown configuration parameter '{key}'")
            if not self._validate_parameter(key, value):
                raise ConfigurationError(f"Invalid value for '{key}': {value!r}")
            self._config[key] = value

    def _load_config(self) -> None:
        """Load and validate configuration from file."""
        if not self.config_path.exists():
            logger.info(f"Configuration file not found at {self.config_path}, using defaults")
            self._config = self.DEFAULTS.copy()
            return

        try:
            with open(self.config_path, encoding="utf-8") as f:
                loaded_config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            logger.warning(
                f"Error parsing configuration file {self.config_path}: {e}, using defaults"
            )
            self._config = self.DEFAULTS.copy()
            return

        if loaded_config is None:
            logger.warning("Configuration file is empty, using defaults")
            self._config = self.DEFAULTS.copy()
            return

        if not isinstance(loaded_config, dict):
            logger.warning(
                f"Configuration file must contain a YAML dictionary, "
                f"got {type(loaded_config)}, using defaults"
            )
            self._config = self.DEFAULTS.copy()
            return

        self._config = self.DEFAULTS.copy()
        self._validate_and_merge(loaded_config)

    def _validate_and_merge(self, loaded_config: Dict[str, Any]) -> None:
        """Validate loaded configuration and merge with defaults.

        Invalid parameters are logged as warnings and defaults are used.
        """
        for key, value in loaded_config.items():
            if key not in self.DEFAULTS:
                logger.warning(f"Unknown configuration parameter '{key}', ignoring")
                continue

            if not self._validate_parameter(key, value):
                logger.warning(
                    f"Invalid value for '{key}': {value}, using default {self.DEFAULTS[key]}"
                )
                continue

            self._config[key] = value

    def _validate_parameter(self, key: str, value: Any) -> bool:
        """Validate a configuration parameter.

        Returns:
            True if valid, False if invalid
        """
        expected_type = type(self.DEFAULTS[key])
        if not isinstance(value, expected_type):
            return False

        if key == "document_name":
            return bool(value.strip())
        elif key == "self_dependency_policy":
            return value in SelfDependencyPolicy.ALL
        elif key == "log_level":
            return value.upper() in _LOG_LEVELS
        elif key == "log_dir":
            return bool(value.strip())

        return True

    @property
    def document_name(self) -> str:
        """Name recorded in graph exports."""
        value = self._config["document_name"]
        assert isinstance(value, str)
        return value

    @property
    def collapse_implicit_inputs(self) -> bool:
        """Whether implicit query inputs are reported as order-only."""
        value = self._config["collapse_implicit_inputs"]
        assert isinstance(value, bool)
        return value

    @property
    def self_dependency_policy(self) -> str:
        """SelfDependencyPolicy value used for new registries."""
        value = self._config["self_dependency_policy"]
        assert isinstance(value, str)
        return value

    @property
    def skip_blank_lines(self) -> bool:
        """Whether blank lines between deps stanzas are accepted."""
        value = self._config["skip_blank_lines"]
        assert isinstance(value, bool)
        return value

    @property
    def log_level(self) -> int:
        """Logging level as a logging module constant."""
        value = self._config["log_level"]
        assert isinstance(value, str)
        level = logging.getLevelName(value.upper())
        assert isinstance(level, int)
        return level

    @property
    def log_dir(self) -> Path:
        """Directory for JSON log files; relative paths resolve against the cwd."""
        value = self._config["log_dir"]
        assert isinstance(value, str)
        return Path(value)
