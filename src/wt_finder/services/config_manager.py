"""Preference management service for Git Worktree Finder."""

import logging
from dataclasses import fields
from pathlib import Path

from ..models.config import PREFERENCES_FILENAME, Preferences
from ..utils.exceptions import ConfigurationError
from ..utils.path_manager import PathManager

logger = logging.getLogger(__name__)


class ConfigManager:
    """
    Loads and saves user preferences.

    Preferences are loaded lazily on first access. A corrupt preferences
    file is logged and replaced by defaults in memory; it is only
    overwritten on the next explicit save.
    """

    def __init__(self, config_file: Path | None = None):
        """
        Initialize the configuration manager.

        Args:
            config_file: Optional path to the preferences file (uses default if None)
        """
        self._config_file = config_file or PathManager.get_config_file(
            PREFERENCES_FILENAME
        )
        self._preferences: Preferences | None = None

    @property
    def config_file(self) -> Path:
        return self._config_file

    @property
    def preferences(self) -> Preferences:
        """Get the current preferences, loading them if necessary."""
        if self._preferences is None:
            self._preferences = self.load_preferences()
        return self._preferences

    def load_preferences(self) -> Preferences:
        """
        Load preferences from file.

        Returns:
            Preferences: Loaded preferences, or defaults if the file is unusable
        """
        try:
            preferences = Preferences.load(self._config_file)
        except ConfigurationError as e:
            logger.error(f"{e.message}; using default preferences")
            preferences = Preferences()

        self._preferences = preferences
        return preferences

    def save_preferences(self) -> bool:
        """
        Save current preferences to file.

        Returns:
            bool: True if save was successful, False otherwise
        """
        if self._preferences is None:
            logger.warning("No preferences to save")
            return False
        return self._preferences.save(self._config_file)

    def update_preferences(self, **changes: str) -> Preferences:
        """
        Update preference fields and save them.

        Raises:
            ConfigurationError: If an unknown preference name is given
        """
        preferences = self.preferences
        known = {field.name for field in fields(Preferences)}
        for key, value in changes.items():
            if key not in known:
                raise ConfigurationError(
                    f"Unknown preference: {key}", config_file=str(self._config_file)
                )
            setattr(preferences, key, value)

        self.save_preferences()
        return preferences

    def reload_preferences(self) -> Preferences:
        """Reload preferences from file, discarding in-memory changes."""
        logger.info("Reloading preferences from file")
        self._preferences = None
        return self.preferences

    def reset_preferences(self) -> Preferences:
        """Reset preferences to defaults (in memory)."""
        logger.info("Resetting preferences to defaults")
        self._preferences = Preferences()
        return self._preferences
