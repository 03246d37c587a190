# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""Configuration loading and validation for reload_guard."""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".reload_guard.yml"


class ConfigurationError(Exception):
    """Raised when configuration validation fails critically."""

    pass


class Config:
    """Configuration for reload_guard.

    Loads configuration from .reload_guard.yml with validation and defaults.
    Problems with the file never raise: they are logged and defaults are used.
    """

    DEFAULTS = {
        "max_file_size_kb": 1024,
        "ignore_patterns": [],
        "dynamic_import_functions": [],
    }

    def __init__(self, config_path: Optional[Path] = None):
        """Initialize configuration.

        Args:
            config_path: Path to configuration file. If None, uses
                .reload_guard.yml in the current working directory.
        """
        if config_path is None:
            config_path = Path.cwd() / CONFIG_FILENAME

        self.config_path = Path(config_path)
        self._config: Dict[str, Any] = {}
        self._load_config()

    @classmethod
    def from_dict(cls, values: Dict[str, Any]) -> "Config":
        """Build a configuration from an in-memory mapping.

        Raises:
            ConfigurationError: If a key is unknown or a value is invalid.
        """
        config = cls.__new__(cls)
        config.config_path = None  # type: ignore[assignment]
        config._config = cls._fresh_defaults()
        for key, value in values.items():
            if key not in cls.DEFAULTS:
                raise ConfigurationError(f"Unknown configuration parameter '{key}'")
            if not config._validate_parameter(key, value):
                raise ConfigurationError(f"Invalid value for '{key}': {value!r}")
            config._config[key] = value
        return config

    @classmethod
    def _fresh_defaults(cls) -> Dict[str, Any]:
        # Copy list defaults so instances never share them
        return {
            key: list(value) if isinstance(value, list) else value
            for key, value in cls.DEFAULTS.items()
        }

    def _load_config(self) -> None:
        """Load and validate configuration from file."""
        if not self.config_path.exists():
            logger.info(f"Configuration file not found at {self.config_path}, using defaults")
            self._config = self._fresh_defaults()
            return

        try:
            with open(self.config_path, encoding="utf-8") as f:
                loaded_config = yaml.safe_load(f)

            if loaded_config is None:
                logger.warning("Configuration file is empty, using defaults")
                self._config = self._fresh_defaults()
                return

            if not isinstance(loaded_config, dict):
                logger.warning(
                    f"Configuration file must contain a YAML dictionary, "
                    f"got {type(loaded_config)}, using defaults"
                )
                self._config = self._fresh_defaults()
                return

            self._config = self._fresh_defaults()
            self._validate_and_merge(loaded_config)

        except yaml.YAMLError as e:
            logger.warning(
                f"Error parsing configuration file {self.config_path}: {e}, using defaults"
            )
            self._config = self._fresh_defaults()
        except OSError as e:
            logger.warning(
                f"Error reading configuration file {self.config_path}: {e}, using defaults"
            )
            self._config = self._fresh_defaults()

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
        # bool is an int subclass; reject it for numeric parameters
        if not isinstance(value, expected_type) or isinstance(value, bool):
            return False

        if key == "max_file_size_kb":
            return value > 0
        elif key in ("ignore_patterns", "dynamic_import_functions"):
            return all(isinstance(item, str) and item for item in value)

        return True

    @property
    def max_file_size_kb(self) -> int:
        """Largest source file, in kilobytes, the reader will load."""
        value = self._config["max_file_size_kb"]
        assert isinstance(value, int)
        return value

    @property
    def ignore_patterns(self) -> List[str]:
        """Additional glob patterns the file watcher ignores."""
        value = self._config["ignore_patterns"]
        assert isinstance(value, list)
        return value

    @property
    def dynamic_import_functions(self) -> List[str]:
        """Extra Python callable names treated as dynamic module loaders.

        Example: ["load_plugin", "plugins.registry.load"]
        """
        value = self._config["dynamic_import_functions"]
        assert isinstance(value, list)
        return value
