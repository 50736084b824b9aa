"""Configuration loading for Excel Prime Finder."""

from .config_manager import ConfigManager, ConfigurationError, config_manager

__all__ = ["ConfigManager", "ConfigurationError", "config_manager"]
