"""Configuration manager for loading and validating config files."""

import copy
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, TypeVar, Union

import yaml

T = TypeVar("T")


logger = logging.getLogger(__name__)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")
MASK = "***MASKED***"


class ConfigurationError(Exception):
    """Raised when configuration is invalid."""


class ConfigManager:
    """Manages loading and accessing configuration from YAML files."""

    def __init__(self, user_config_path: str) -> None:
        """Initialize the configuration manager.

        Args:
            user_config_path: Path to user config file (required)

        Raises:
            ConfigurationError: If config file doesn't exist or is invalid
        """
        self._config: Dict[str, Any] = {}
        self._user_config_path = user_config_path
        self._load_config()

    def _load_yaml_file(self, path: Path) -> Dict[str, Any]:
        """Load a YAML file and return its contents.

        Args:
            path: Path to YAML file

        Returns:
            Dictionary containing the YAML contents

        Raises:
            ConfigurationError: If file cannot be read or parsed
        """
        try:
            with open(path, "r", encoding="utf-8") as f:
                content = yaml.safe_load(f)
        except FileNotFoundError as e:
            raise ConfigurationError(f"Config file not found: {path}") from e
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Failed to parse YAML file {path}: {e}") from e
        except OSError as e:
            raise ConfigurationError(f"Failed to load config file {path}: {e}") from e

        if content is None:
            return {}
        if not isinstance(content, dict):
            raise ConfigurationError(f"Top level of {path} must be a mapping")
        return content

    def _validate_config(self) -> None:
        """Validate the loaded configuration.

        Pin descriptors themselves are checked when the registry is built.

        Raises:
            ConfigurationError: If configuration is invalid
        """
        if "key_pin_control" not in self._config:
            raise ConfigurationError("Missing required config section: key_pin_control")
        if not isinstance(self._config["key_pin_control"], list):
            raise ConfigurationError("'key_pin_control' must be a list")

        timing = self._config.get("timing", {})
        if not isinstance(timing, dict):
            raise ConfigurationError("'timing' section must be a dictionary")
        for timing_name in ("blink_lead", "blink_hold"):
            if timing_name in timing:
                value = timing[timing_name]
                if isinstance(value, bool) or not isinstance(value, (int, float)):
                    raise ConfigurationError(f"Timing '{timing_name}' must be a number")
                if value <= 0:
                    raise ConfigurationError(f"Timing '{timing_name}' must be positive")

        web = self._config.get("web", {})
        if not isinstance(web, dict):
            raise ConfigurationError("'web' section must be a dictionary")
        if "port" in web:
            port = web["port"]
            if isinstance(port, bool) or not isinstance(port, int) or not 0 < port < 65536:
                raise ConfigurationError("'web.port' must be an integer between 1 and 65535")

        logging_config = self._config.get("logging", {})
        if not isinstance(logging_config, dict):
            raise ConfigurationError("'logging' section must be a dictionary")
        level = logging_config.get("level")
        if level is not None and str(level).upper() not in LOG_LEVELS:
            raise ConfigurationError(
                f"'logging.level' must be one of: {', '.join(LOG_LEVELS)}"
            )

    def _load_config(self) -> None:
        """Load configuration from user config file.

        Raises:
            ConfigurationError: If config file doesn't exist or is invalid
        """
        config_path = Path(self._user_config_path)

        if not config_path.exists():
            raise ConfigurationError(
                f"Configuration file not found: {config_path}\n"
                f"Please create a config file. See config.yml.example for reference."
            )

        logger.info("Loading configuration from: %s", config_path)
        self._config = self._load_yaml_file(config_path)

        self._validate_config()
        logger.info("Configuration loaded and validated successfully")

    def get(self, key: str, default: Optional[T] = None) -> Union[Any, T]:
        """Get a configuration value by key.

        Supports dot notation for nested values (e.g., 'web.port')

        Args:
            key: Configuration key (supports dot notation)
            default: Default value if key not found

        Returns:
            Configuration value or default (type matches default when provided)
        """
        keys = key.split(".")
        value: Any = self._config

        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default  # type: ignore[return-value]

        return value

    def get_key_pin_control(self) -> List[Dict[str, Any]]:
        """Get the credential groups, each with a key and its pins.

        Returns:
            List of group dictionaries in file order
        """
        groups: List[Dict[str, Any]] = self.get("key_pin_control", [])
        return groups

    def get_timing_config(self) -> Dict[str, Any]:
        """Get timing configuration.

        Returns:
            Timing configuration dictionary
        """
        return self.get("timing", {})

    def to_dict_safe(self) -> Dict[str, Any]:
        """Export config with credential keys masked.

        Returns:
            Config dict with every group key masked
        """
        config = copy.deepcopy(self._config)
        for group in config.get("key_pin_control", []):
            if isinstance(group, dict) and "key" in group:
                group["key"] = MASK
        return config
