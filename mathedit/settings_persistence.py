"""Settings persistence for editor preferences.

Preferences such as the undo history depth are stored as JSON in an
OS-appropriate config directory and survive application restarts. The undo
history itself is never persisted.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import platformdirs

from .constants import EditorConstants

logger = logging.getLogger(__name__)


class SettingsPersistence:
    """Manages persistent storage of editor settings."""

    def __init__(self, config_dir: Optional[Path] = None):
        """Initialize settings persistence.

        Args:
            config_dir: Directory holding the settings file. Defaults to the
                platform's user config directory.
        """
        if config_dir is None:
            config_dir = Path(platformdirs.user_config_dir(
                EditorConstants.SETTINGS_APP_NAME,
                EditorConstants.SETTINGS_APP_AUTHOR,
            ))
        self._config_dir = Path(config_dir)
        self._settings_file = self._config_dir / EditorConstants.SETTINGS_FILE_NAME
        self._settings_cache: Optional[Dict[str, Any]] = None

    def _ensure_config_dir(self) -> None:
        """Ensure the config directory exists."""
        try:
            self._config_dir.mkdir(parents=True, exist_ok=True)
        except (OSError, PermissionError) as e:
            logger.warning(f"Could not create config directory {self._config_dir}: {e}")

    def _load_all_settings(self) -> Dict[str, Any]:
        """Load settings from disk.

        Returns:
            Dictionary of settings. Empty if the file doesn't exist or
            can't be read.
        """
        if self._settings_cache is not None:
            return self._settings_cache

        if not self._settings_file.exists():
            self._settings_cache = {}
            return self._settings_cache

        try:
            with open(self._settings_file, 'r', encoding='utf-8') as f:
                data = json.load(f)

            if not isinstance(data, dict):
                logger.warning("Settings file has invalid format (not a dict), ignoring")
                self._settings_cache = {}
                return self._settings_cache

            self._settings_cache = data
            return self._settings_cache

        except (json.JSONDecodeError, OSError, PermissionError) as e:
            logger.warning(f"Could not load settings from {self._settings_file}: {e}")
            self._settings_cache = {}
            return self._settings_cache

    def load_settings(self) -> Dict[str, Any]:
        """Load the stored settings, dropping any invalid values.

        Returns:
            Dictionary of valid settings. Empty dict if none are stored.
        """
        settings = {}
        for key, value in self._load_all_settings().items():
            if self.validate_setting(key, value):
                settings[key] = value
            else:
                logger.warning(f"Ignoring invalid value for setting {key}: {value!r}")
        return settings

    def save_settings(self, settings: Dict[str, Any]) -> bool:
        """Save settings to disk atomically.

        Args:
            settings: Dictionary of settings to save.

        Returns:
            True if save was successful, False otherwise.
        """
        self._ensure_config_dir()

        # Use atomic write pattern (temp file + rename)
        temp_file = self._settings_file.with_suffix('.tmp')

        try:
            with open(temp_file, 'w', encoding='utf-8') as f:
                json.dump(settings, f, indent=2)

            temp_file.replace(self._settings_file)

            self._settings_cache = dict(settings)
            return True

        except (OSError, PermissionError, TypeError) as e:
            logger.warning(f"Could not save settings to {self._settings_file}: {e}")
            # Clean up temp file if it exists
            try:
                if temp_file.exists():
                    temp_file.unlink()
            except OSError:
                pass
            return False

    def validate_setting(self, key: str, value: Any) -> bool:
        """Validate a setting value.

        Args:
            key: Setting key name.
            value: Setting value to validate.

        Returns:
            True if setting is valid, False otherwise.
        """
        if value is None:
            return True  # None is valid (means "not set")

        if key == 'undo_maximum_depth':
            # bool is an int subclass; reject it explicitly
            if not isinstance(value, int) or isinstance(value, bool):
                return False
            return EditorConstants.UNDO_MIN_DEPTH <= value <= EditorConstants.UNDO_MAX_DEPTH

        if key == 'undo_trace':
            return isinstance(value, bool)

        # Unknown settings are considered valid (forward compatibility)
        return True

    def clear_cache(self) -> None:
        """Clear the in-memory cache of settings."""
        self._settings_cache = None


# Global instance
_persistence: Optional[SettingsPersistence] = None


def get_persistence() -> SettingsPersistence:
    """Get the global settings persistence instance.

    Returns:
        The singleton SettingsPersistence instance.
    """
    global _persistence
    if _persistence is None:
        _persistence = SettingsPersistence()
    return _persistence
