"""Configuration management for Excel Prime Finder.

This module provides centralized configuration loading and management
with support for YAML files, environment variable overrides, and validation.
"""

import copy
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from excel_primes.models.data_models import Config, LoggingConfig


logger = logging.getLogger(__name__)


class ConfigurationError(Exception):
    """Raised when configuration loading or validation fails."""
    pass


class ConfigManager:
    """Manages application configuration loading and validation.

    Configuration Loading Order:
    1. If config_path is provided, load that file
    2. If config_path is None, try to load config/default.yaml
    3. If config/default.yaml doesn't exist, use built-in defaults

    Environment variables prefixed with EXCEL_PRIMES_ override file values.

    Example:
        >>> config = config_manager.load_config()
        >>> config.error_exit_code
        0
    """

    ENV_PREFIX = "EXCEL_PRIMES_"

    DEFAULT_CONFIG_PATH = Path("config/default.yaml")

    DEFAULT_CONFIG = {
        "processing": {
            "error_exit_code": 0,
        },
        "logging": {
            "level": "WARNING",
            "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            "file": {
                "enabled": False,
                "path": "./logs/excel_primes.log",
            },
            "console": {
                "enabled": True,
            },
            "structured": {
                "enabled": False,
            },
        },
    }

    ENV_MAPPINGS = {
        "LOG_LEVEL": ["logging", "level"],
        "LOG_FILE_ENABLED": ["logging", "file", "enabled"],
        "LOG_FILE_PATH": ["logging", "file", "path"],
        "CONSOLE_LOGGING": ["logging", "console", "enabled"],
        "STRUCTURED_LOGGING": ["logging", "structured", "enabled"],
        "ERROR_EXIT_CODE": ["processing", "error_exit_code"],
    }

    def __init__(self) -> None:
        self._config_cache: Dict[str, Config] = {}

    def load_config(
        self,
        config_path: Optional[Union[str, Path]] = None,
        use_env_overrides: bool = True
    ) -> Config:
        """Load configuration from file with optional environment overrides.

        Args:
            config_path: Path to configuration file. If None, will try to load
                        config/default.yaml, falling back to built-in defaults
            use_env_overrides: Whether to apply environment variable overrides

        Returns:
            Loaded and validated configuration

        Raises:
            ConfigurationError: If configuration loading or validation fails
        """
        cache_key = f"{config_path}:{use_env_overrides}"
        if cache_key in self._config_cache:
            logger.debug(f"Using cached configuration for {cache_key}")
            return self._config_cache[cache_key]

        try:
            config_dict = self._load_config_dict(config_path)

            if use_env_overrides:
                config_dict = self._apply_env_overrides(config_dict)

            config = self._dict_to_config(config_dict)
        except ConfigurationError:
            raise
        except Exception as e:
            raise ConfigurationError(f"Failed to load configuration: {e}") from e

        self._config_cache[cache_key] = config
        logger.debug(f"Configuration loaded from {config_path or 'defaults'}")
        return config

    def _load_config_dict(self, config_path: Optional[Union[str, Path]]) -> Dict[str, Any]:
        """Load configuration dictionary from file or defaults.

        Args:
            config_path: Path to configuration file

        Returns:
            Configuration dictionary
        """
        if config_path is None:
            if not self.DEFAULT_CONFIG_PATH.exists():
                return copy.deepcopy(self.DEFAULT_CONFIG)
            config_path = self.DEFAULT_CONFIG_PATH

        config_file = Path(config_path)
        if not config_file.exists():
            raise ConfigurationError(f"Configuration file not found: {config_file}")

        try:
            with open(config_file, 'r', encoding='utf-8') as f:
                file_config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {config_file}: {e}") from e
        except (IOError, OSError) as e:
            raise ConfigurationError(f"Cannot read {config_file}: {e}") from e

        if not isinstance(file_config, dict):
            raise ConfigurationError(f"Top level of {config_file} must be a mapping")

        return self._deep_merge(copy.deepcopy(self.DEFAULT_CONFIG), file_config)

    def _apply_env_overrides(self, config_dict: Dict[str, Any]) -> Dict[str, Any]:
        """Apply environment variable overrides to configuration.

        Args:
            config_dict: Base configuration dictionary

        Returns:
            Configuration dictionary with environment overrides applied
        """
        for suffix, config_path in self.ENV_MAPPINGS.items():
            env_var = f"{self.ENV_PREFIX}{suffix}"
            env_value = os.getenv(env_var)
            if env_value is not None:
                converted_value = self._convert_env_value(env_value)
                self._set_nested_value(config_dict, config_path, converted_value)
                logger.debug(f"Applied environment override: {env_var}={converted_value}")

        return config_dict

    def _convert_env_value(self, value: str) -> Any:
        """Convert environment variable string to bool, int or str."""
        if value.lower() in ("true", "false"):
            return value.lower() == "true"

        try:
            return int(value)
        except ValueError:
            return value

    def _set_nested_value(
        self,
        dictionary: Dict[str, Any],
        path: List[str],
        value: Any
    ) -> None:
        """Set a nested dictionary value using a path list."""
        for key in path[:-1]:
            dictionary = dictionary.setdefault(key, {})
        dictionary[path[-1]] = value

    def _deep_merge(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Deep merge two dictionaries, with override taking precedence.

        Args:
            base: Base dictionary
            override: Override dictionary

        Returns:
            Merged dictionary
        """
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result

    def _dict_to_config(self, config_dict: Dict[str, Any]) -> Config:
        """Convert configuration dictionary to Config object.

        Raises:
            ConfigurationError: If a value fails validation
        """
        processing = config_dict.get("processing") or {}
        logging_section = config_dict.get("logging") or {}

        try:
            logging_config = LoggingConfig(
                level=str(logging_section.get("level", "WARNING")),
                format=logging_section.get("format", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"),
                file_enabled=bool(logging_section.get("file", {}).get("enabled", False)),
                file_path=Path(logging_section.get("file", {}).get("path", "./logs/excel_primes.log")),
                console_enabled=bool(logging_section.get("console", {}).get("enabled", True)),
                structured_enabled=bool(logging_section.get("structured", {}).get("enabled", False)),
            )

            return Config(
                logging=logging_config,
                error_exit_code=processing.get("error_exit_code", 0),
            )
        except ValueError as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e

    def save_config(self, config: Config, config_path: Union[str, Path]) -> None:
        """Save configuration to YAML file.

        Args:
            config: Configuration to save
            config_path: Path to save configuration file

        Raises:
            ConfigurationError: If saving fails
        """
        try:
            config_file = Path(config_path)
            config_file.parent.mkdir(parents=True, exist_ok=True)

            with open(config_file, 'w', encoding='utf-8') as f:
                yaml.dump(self._config_to_dict(config), f, default_flow_style=False, sort_keys=False)

            logger.info(f"Configuration saved to {config_file}")

        except Exception as e:
            raise ConfigurationError(f"Failed to save configuration: {e}") from e

    def _config_to_dict(self, config: Config) -> Dict[str, Any]:
        """Convert Config object to dictionary for serialization."""
        return {
            "processing": {
                "error_exit_code": config.error_exit_code,
            },
            "logging": {
                "level": config.logging.level,
                "format": config.logging.format,
                "file": {
                    "enabled": config.logging.file_enabled,
                    "path": str(config.logging.file_path),
                },
                "console": {
                    "enabled": config.logging.console_enabled,
                },
                "structured": {
                    "enabled": config.logging.structured_enabled,
                },
            },
        }

    def clear_cache(self) -> None:
        """Clear configuration cache."""
        self._config_cache.clear()
        logger.debug("Configuration cache cleared")


# Global configuration manager instance
config_manager = ConfigManager()
