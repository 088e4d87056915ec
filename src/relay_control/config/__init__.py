"""Configuration loading for the relay controller."""

from relay_control.config.config_manager import ConfigManager, ConfigurationError

__all__ = ["ConfigManager", "ConfigurationError"]
