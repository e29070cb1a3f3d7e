"""Preference model for Git Worktree Finder."""

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from ..utils.exceptions import ConfigurationError
from ..utils.path_manager import PathManager

logger = logging.getLogger(__name__)

PREFERENCES_FILENAME = "preferences.json"
ROOTS_ENV_VAR = "WT_FINDER_ROOTS"


@dataclass
class Preferences:
    """
    User preferences.

    Attributes:
        roots: Newline-separated directories to scan for repositories
        open_with: Application used to open a worktree (opaque to the core)
        default_worktree_path: Directory new worktrees are created in
    """

    roots: str = ""
    open_with: str = ""
    default_worktree_path: str = ""

    def root_paths(self) -> list[str]:
        """
        Get the configured roots as expanded paths.

        The ``WT_FINDER_ROOTS`` environment variable, when set, replaces the
        stored value.
        """
        raw = os.environ.get(ROOTS_ENV_VAR)
        return PathManager.expand_roots(raw if raw is not None else self.roots)

    def worktree_destination(self, worktree_name: str) -> str:
        """
        Build the folder path for a new worktree.

        Raises:
            ConfigurationError: If no default worktree path is configured
        """
        base_dir = self.default_worktree_path.strip()
        if not base_dir:
            raise ConfigurationError(
                "Default worktree path is not set",
                suggested_action="Set default_worktree_path in the preferences.",
            )
        name = PathManager.sanitize_worktree_name(worktree_name)
        return str(Path(PathManager.expand_home(base_dir)) / name)

    def to_dict(self) -> dict[str, Any]:
        return {
            "roots": self.roots,
            "open_with": self.open_with,
            "default_worktree_path": self.default_worktree_path,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Preferences":
        return cls(
            roots=data.get("roots", ""),
            open_with=data.get("open_with", ""),
            default_worktree_path=data.get("default_worktree_path", ""),
        )

    def save(self, config_file: Path | None = None) -> bool:
        """
        Save preferences to a JSON file.

        Returns:
            bool: True if save was successful, False otherwise
        """
        if config_file is None:
            config_file = PathManager.get_config_file(PREFERENCES_FILENAME)

        try:
            config_file.parent.mkdir(parents=True, exist_ok=True)
            with open(config_file, "w", encoding="utf-8") as f:
                json.dump(self.to_dict(), f, indent=2, ensure_ascii=False)

            logger.info(f"Preferences saved to: {config_file}")
            return True

        except (OSError, TypeError) as e:
            logger.error(f"Failed to save preferences to {config_file}: {e}")
            return False

    @classmethod
    def load(cls, config_file: Path | None = None) -> "Preferences":
        """
        Load preferences from a JSON file.

        A missing file yields defaults.

        Raises:
            ConfigurationError: If the file exists but cannot be read or parsed
        """
        if config_file is None:
            config_file = PathManager.get_config_file(PREFERENCES_FILENAME)

        if not config_file.exists():
            logger.info(f"No preferences file at {config_file}, using defaults")
            return cls()

        try:
            with open(config_file, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(
                f"Failed to load preferences: {e}", config_file=str(config_file)
            ) from e

        if not isinstance(data, dict):
            raise ConfigurationError(
                "Preferences file must contain a JSON object",
                config_file=str(config_file),
            )

        return cls.from_dict(data)
