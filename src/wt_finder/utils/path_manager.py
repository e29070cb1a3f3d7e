"""OS-specific path management utilities."""

import os
import re
import sys
from pathlib import Path

from PyQt6.QtCore import QFile

from ..utils.exceptions import FileSystemError, PathError

_SEPARATORS = re.compile(r"[/\\]")


class PathManager:
    """Manages OS-specific paths and path normalisation for worktrees."""

    APP_NAME = "GitWorktreeFinder"

    @staticmethod
    def get_config_dir() -> Path:
        """
        Get OS-appropriate configuration directory.

        Returns:
            Path to configuration directory
        """
        if sys.platform == "darwin":  # macOS
            base_dir = Path.home() / "Library" / "Application Support"
        elif sys.platform == "win32":  # Windows
            base_dir = Path.home() / "AppData" / "Roaming"
        else:  # Linux and other Unix-like systems
            base_dir = Path.home() / ".config"

        return base_dir / PathManager.APP_NAME

    @staticmethod
    def get_log_dir() -> Path:
        """
        Get OS-appropriate log directory.

        Returns:
            Path to log directory
        """
        if sys.platform == "darwin":  # macOS
            return Path.home() / "Library" / "Logs" / PathManager.APP_NAME
        if sys.platform == "win32":  # Windows
            return Path.home() / "AppData" / "Local" / PathManager.APP_NAME / "Logs"
        return Path.home() / ".local" / "share" / "git-worktree-finder" / "logs"

    @staticmethod
    def ensure_directories() -> None:
        """
        Create the configuration and log directories if they don't exist.

        Raises:
            PathError: If a directory cannot be created
        """
        for directory in (PathManager.get_config_dir(), PathManager.get_log_dir()):
            try:
                directory.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise PathError(
                    f"Failed to create directory {directory}: {e}", path=str(directory)
                ) from e

    @staticmethod
    def get_config_file(filename: str) -> Path:
        """Get path to a configuration file."""
        return PathManager.get_config_dir() / filename

    @staticmethod
    def get_log_file(filename: str) -> Path:
        """Get path to a log file."""
        return PathManager.get_log_dir() / filename

    @staticmethod
    def expand_home(path: str) -> str:
        """
        Expand a leading ``~`` to the invoking user's home directory.

        Anything after the tilde is joined onto the home directory, so
        ``~/code`` and ``~code`` both land inside it.
        """
        if not path.startswith("~"):
            return path
        rest = path[1:].lstrip("/\\")
        home = Path.home()
        return str(home / rest) if rest else str(home)

    @staticmethod
    def expand_roots(raw: str | None) -> list[str]:
        """
        Turn the newline-separated roots preference into a list of paths.

        Lines are trimmed, blank lines dropped, duplicates removed (first
        occurrence wins) and a leading ``~`` expanded.

        Args:
            raw: Raw preference text

        Returns:
            List of root directory paths in their configured order
        """
        if not raw or not raw.strip():
            return []

        roots: list[str] = []
        for line in raw.split("\n"):
            entry = line.strip()
            if not entry:
                continue
            expanded = PathManager.expand_home(entry)
            if expanded not in roots:
                roots.append(expanded)
        return roots

    @staticmethod
    def sanitize_worktree_name(name: str) -> str:
        """Trim a worktree/branch name and replace path separators with ``-``."""
        return _SEPARATORS.sub("-", (name or "").strip())

    @staticmethod
    def resolve_worktree_path(worktree_path: str, repo_path: str) -> str:
        """
        Resolve a destination worktree path.

        Relative paths are taken from the repository's parent directory:
        ``feature`` lands beside the repository and ``../feature`` one level
        above the folder holding it.
        """
        if os.path.isabs(worktree_path):
            return worktree_path
        repo_parent = os.path.dirname(os.path.abspath(repo_path))
        return os.path.normpath(os.path.join(repo_parent, worktree_path))

    @staticmethod
    def move_to_trash(path: str) -> None:
        """
        Move a file or directory to the system trash.

        Args:
            path: Path to move

        Raises:
            FileSystemError: If the platform trash refused the move
        """
        if not QFile(path).moveToTrash():
            raise FileSystemError(
                f"Could not move {path} to the trash",
                path=path,
                operation="move_to_trash",
                suggested_action="Delete the folder manually.",
            )
