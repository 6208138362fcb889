"""Configuration manager for loading tool settings."""

import logging
from pathlib import Path
from typing import Dict, Any, Optional, Union
import yaml

from ..utils.constants import (
    CONFIG_FILE,
    DEFAULT_CONFIG_PATH,
    DEFAULT_SYSTEMCTL_TIMEOUT,
    DEFAULT_TARGET_DIR,
    DEFAULT_USER_TARGET_DIR,
)

logger = logging.getLogger(__name__)


class ConfigManager:
    """Manages systemyml settings.

    Settings come from an optional YAML file. Missing keys, a missing file or
    an invalid file all fall back to built-in defaults.
    """

    DEFAULTS = {
        "config_path": DEFAULT_CONFIG_PATH,
        "target_dir": DEFAULT_TARGET_DIR,
        "user_target_dir": DEFAULT_USER_TARGET_DIR,
        "user_mode": False,
        "systemctl_timeout": DEFAULT_SYSTEMCTL_TIMEOUT,
    }

    def __init__(self, config_file: Optional[Union[str, Path]] = None):
        """Initialize the config manager.

        Args:
            config_file: Settings file to read (defaults to ~/.config/systemyml/config.yaml)
        """
        self.config_file = Path(config_file) if config_file else CONFIG_FILE
        self.settings: Dict[str, Any] = {}
        self._ensure_default_settings()

    def load_config(self) -> bool:
        """Load settings from file.

        Returns:
            True if settings loaded successfully, False if defaults are used
        """
        if not self.config_file.exists():
            logger.debug(f"Settings file {self.config_file} not found, using defaults")
            self._load_defaults()
            return False

        try:
            with open(self.config_file, 'r') as f:
                data = yaml.safe_load(f)

            if not data:
                logger.warning("Empty settings file, using defaults")
                self._load_defaults()
                return False

            if not self._validate_config(data):
                logger.error("Invalid settings file, using defaults")
                self._load_defaults()
                return False

            self.settings = dict(data)
            self._ensure_default_settings()

            logger.info(f"Loaded settings from {self.config_file}")
            return True

        except yaml.YAMLError as e:
            logger.error(f"YAML parsing error: {e}")
            self._load_defaults()
            return False
        except OSError as e:
            logger.error(f"Failed to load settings: {e}")
            self._load_defaults()
            return False

    def get_setting(self, key: str, default: Any = None) -> Any:
        """Get a setting value.

        Args:
            key: Setting key
            default: Default value if key not found

        Returns:
            Setting value or default
        """
        return self.settings.get(key, default)

    def resolve_target_dir(self, user_mode: bool) -> Path:
        """Get the default unit directory for the system or user manager."""
        key = "user_target_dir" if user_mode else "target_dir"
        return Path(self.settings[key]).expanduser()

    def _validate_config(self, data: Any) -> bool:
        """Validate settings data structure.

        Args:
            data: Parsed settings

        Returns:
            True if valid, False otherwise
        """
        if not isinstance(data, dict):
            logger.error("Settings must be a dictionary")
            return False

        for key in ("config_path", "target_dir", "user_target_dir"):
            if key in data and not isinstance(data[key], str):
                logger.error(f"Setting '{key}' must be a string")
                return False

        if "user_mode" in data and not isinstance(data["user_mode"], bool):
            logger.error("Setting 'user_mode' must be true or false")
            return False

        timeout = data.get("systemctl_timeout", DEFAULT_SYSTEMCTL_TIMEOUT)
        if isinstance(timeout, bool) or not isinstance(timeout, int) or timeout <= 0:
            logger.error("Setting 'systemctl_timeout' must be a positive integer")
            return False

        unknown = set(data) - set(self.DEFAULTS)
        if unknown:
            logger.warning(f"Ignoring unknown settings: {', '.join(sorted(map(str, unknown)))}")

        return True

    def _load_defaults(self):
        """Load default settings."""
        self.settings = {}
        self._ensure_default_settings()

    def _ensure_default_settings(self):
        """Ensure all default settings exist."""
        for key, value in self.DEFAULTS.items():
            if key not in self.settings:
                self.settings[key] = value
