"""Discovery of git repositories below a root directory."""

import logging
import os

from ..models.worktree import RepositoryRecord
from .filesystem_probe import (
    is_git_repository,
    is_linked_worktree,
    resolve_main_repository,
)

logger = logging.getLogger(__name__)

MAX_REPO_SCAN_DEPTH = 15


class RepositoryScanner:
    """
    Walks a directory tree and collects the distinct main repositories in it.

    A directory that is a repository (or linked worktree) is recorded and not
    descended into. Linked worktrees are recorded as the main repository they
    belong to, so N worktrees of one repository produce a single record.
    Symlinked subdirectories are not followed.
    """

    def __init__(self, max_depth: int = MAX_REPO_SCAN_DEPTH):
        """
        Initialize the scanner.

        Args:
            max_depth: Deepest directory level (root is 0) that is examined
        """
        self.max_depth = max_depth

    def scan(self, root: str) -> list[RepositoryRecord]:
        """
        Find repositories below a root directory.

        Args:
            root: Directory to scan

        Returns:
            Repositories in walk order; empty if root is not a directory
        """
        if not os.path.isdir(root):
            logger.debug(f"Skipping root that is not a directory: {root}")
            return []

        results: list[RepositoryRecord] = []
        seen: set[str] = set()
        stack: list[tuple[str, int]] = [(os.path.abspath(root), 0)]

        while stack:
            directory, depth = stack.pop()
            if depth > self.max_depth:
                continue
            try:
                subdirectories = self._visit(directory, results, seen)
            except OSError as e:
                logger.debug(f"Skipping {directory}: {e}")
                continue
            # Reversed so the walk pops them in name order
            for subdirectory in reversed(subdirectories):
                stack.append((subdirectory, depth + 1))

        logger.debug(f"Found {len(results)} repositories under {root}")
        return results

    def _visit(
        self, directory: str, results: list[RepositoryRecord], seen: set[str]
    ) -> list[str]:
        """Record a repository, or return the subdirectories to walk next."""
        if not os.path.isdir(directory):
            return []

        if is_git_repository(directory):
            if is_linked_worktree(directory):
                main_path = resolve_main_repository(directory)
            else:
                main_path = os.path.abspath(directory)

            if main_path and main_path not in seen:
                seen.add(main_path)
                results.append(RepositoryRecord(path=main_path))
            return []

        with os.scandir(directory) as entries:
            names = sorted(
                entry.name
                for entry in entries
                if entry.name != ".git" and entry.is_dir(follow_symlinks=False)
            )
        return [os.path.join(directory, name) for name in names]
