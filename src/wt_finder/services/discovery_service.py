"""Aggregation of worktrees across all configured roots."""

import asyncio
import logging
import os
from collections.abc import Iterable

from ..models.worktree import DETACHED_BRANCH, WorktreeItem
from .repository_scanner import RepositoryScanner
from .worktree_lister import WorktreeLister

logger = logging.getLogger(__name__)


def _modified_ms(path: str) -> float | None:
    try:
        return os.stat(path).st_mtime * 1000
    except OSError:
        # Deleted behind git's back
        return None


def sort_worktrees(items: Iterable[WorktreeItem]) -> list[WorktreeItem]:
    """Order worktrees most recently modified first, ties by path."""
    return sorted(items, key=WorktreeItem.sort_key)


def filter_worktrees(items: Iterable[WorktreeItem], query: str) -> list[WorktreeItem]:
    """Keep the worktrees matching every word of a search query."""
    if not query.strip():
        return list(items)
    return [item for item in items if item.matches(query)]


class WorktreeDiscoveryService:
    """
    Builds the full list of worktrees below a set of root directories.

    Every call recomputes from the filesystem and git; nothing is cached.
    Each physical worktree appears once even when reachable from several
    roots, keeping the first occurrence.
    """

    def __init__(
        self,
        scanner: RepositoryScanner | None = None,
        lister: WorktreeLister | None = None,
    ):
        self._scanner = scanner or RepositoryScanner()
        self._lister = lister or WorktreeLister()

    async def discover(self, roots: Iterable[str]) -> list[WorktreeItem]:
        """
        Discover every worktree of every repository below the roots.

        Args:
            roots: Root directories in priority order

        Returns:
            List[WorktreeItem]: Sorted most recently modified first
        """
        items: list[WorktreeItem] = []
        seen_paths: set[str] = set()

        for root in roots:
            repositories = await asyncio.to_thread(self._scanner.scan, root)
            for repository in repositories:
                worktrees = await self._lister.list_worktrees(repository.path)
                if not worktrees:
                    continue

                repo_name = os.path.basename(repository.path)
                main_path = self._absolute(worktrees[0].path, repository.path)

                for worktree in worktrees:
                    abs_path = self._absolute(worktree.path, repository.path)
                    if abs_path in seen_paths:
                        continue
                    seen_paths.add(abs_path)

                    items.append(
                        WorktreeItem(
                            path=abs_path,
                            branch=worktree.branch or DETACHED_BRANCH,
                            repo_name=repo_name,
                            is_main=abs_path == main_path,
                            repo_root=repository.path,
                            last_modified_ms=_modified_ms(abs_path),
                        )
                    )

        logger.info(f"Discovered {len(items)} worktrees")
        return sort_worktrees(items)

    @staticmethod
    def _absolute(path: str, repo_path: str) -> str:
        if os.path.isabs(path):
            return path
        return os.path.normpath(os.path.join(repo_path, path))
