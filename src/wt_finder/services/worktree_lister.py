"""Listing of the worktrees registered with a repository."""

import logging
import os

from ..models.worktree import WorktreeLine
from ..utils.exceptions import GitError
from .filesystem_probe import is_git_repository
from .git_runner import GitRunner

logger = logging.getLogger(__name__)


def parse_worktree_porcelain(output: str) -> list[WorktreeLine]:
    """
    Parse the output of 'git worktree list --porcelain'.

    Args:
        output: Raw output from git worktree list --porcelain

    Returns:
        List[WorktreeLine]: One entry per worktree, in git's order
    """
    worktrees: list[WorktreeLine] = []
    current: dict = {}

    def flush() -> None:
        if current.get("path"):
            worktrees.append(WorktreeLine(**current))
        current.clear()

    for line in output.split("\n"):
        if line.startswith("worktree "):
            flush()
            current["path"] = line[len("worktree ") :].strip()
        elif line.startswith("branch "):
            branch = line[len("branch ") :].strip()
            current["branch"] = branch.removeprefix("refs/heads/")
        elif line.startswith("bare"):
            current["is_bare"] = True
        elif line == "":
            flush()

    flush()
    return worktrees


class WorktreeLister:
    """Runs ``git worktree list`` for a repository and parses the result."""

    def __init__(self, runner: GitRunner | None = None):
        self._runner = runner or GitRunner()

    async def list_worktrees(self, repo_path: str) -> list[WorktreeLine]:
        """
        Get the worktrees of a repository.

        Any failure (missing repository, git error) is logged and yields an
        empty list.

        Args:
            repo_path: Path to the repository

        Returns:
            List[WorktreeLine]: Worktrees with the primary checkout first
        """
        if not os.path.exists(repo_path) or not is_git_repository(repo_path):
            logger.debug(f"Not a git repository, skipping: {repo_path}")
            return []

        try:
            result = await self._runner.run(
                ["worktree", "list", "--porcelain"], cwd=os.path.abspath(repo_path)
            )
        except GitError as e:
            logger.debug(f"Could not list worktrees for {repo_path}: {e}")
            return []

        if not result.success:
            logger.debug(f"Could not list worktrees for {repo_path}: {result.error}")
            return []

        worktrees = parse_worktree_porcelain(result.output)
        logger.debug(f"Found {len(worktrees)} worktrees in {repo_path}")
        return worktrees
