"""Branch and remote queries used when creating worktrees."""

import logging
import os
import re

from ..utils.exceptions import GitError
from .filesystem_probe import is_git_repository
from .git_runner import GitRunner

logger = logging.getLogger(__name__)

DEFAULT_REMOTE = "origin"

_REMOTE_PREFIX = re.compile(r"^remotes/[^/]+/")
_COMMON_REMOTE_PREFIX = re.compile(r"^(origin|upstream)/")


class BranchService:
    """
    Read-only branch queries against a repository.

    Every query degrades to an empty/negative answer on failure.
    """

    def __init__(self, runner: GitRunner | None = None):
        self._runner = runner or GitRunner()

    async def _query(self, repo_path: str, args: list[str]) -> str | None:
        """Run a git query, returning stdout or None on any failure."""
        if not os.path.exists(repo_path) or not is_git_repository(repo_path):
            return None
        try:
            result = await self._runner.run(args, cwd=os.path.abspath(repo_path))
        except GitError as e:
            logger.debug(f"git {' '.join(args)} failed in {repo_path}: {e}")
            return None
        return result.output if result.success else None

    async def list_branches(self, repo_path: str) -> list[str]:
        """
        Get the local and remote branch names of a repository.

        Remote prefixes are stripped so a branch present locally and on
        ``origin`` or ``upstream`` is listed once.

        Returns:
            List[str]: Sorted, de-duplicated branch names
        """
        output = await self._query(
            repo_path, ["branch", "-a", "--format=%(refname:short)"]
        )
        if output is None:
            return []

        branches: set[str] = set()
        for line in output.split("\n"):
            ref = line.strip()
            if not ref or ref == "HEAD":
                continue
            name = _COMMON_REMOTE_PREFIX.sub("", _REMOTE_PREFIX.sub("", ref))
            if name and name != "HEAD":
                branches.add(name)
        return sorted(branches)

    async def has_local_branch(self, repo_path: str, branch: str) -> bool:
        """Check whether ``refs/heads/<branch>`` exists."""
        output = await self._query(
            repo_path, ["rev-parse", "--verify", f"refs/heads/{branch}"]
        )
        return output is not None

    async def default_remote(self, repo_path: str) -> str | None:
        """Get ``origin`` if configured, else the first listed remote."""
        output = await self._query(repo_path, ["remote"])
        if output is None:
            return None

        remotes = [remote.strip() for remote in output.split("\n") if remote.strip()]
        if DEFAULT_REMOTE in remotes:
            return DEFAULT_REMOTE
        return remotes[0] if remotes else None

    async def upstream_ref(self, repo_path: str, local_branch: str) -> str | None:
        """
        Get the upstream of a local branch, e.g. ``origin/main``.

        Returns:
            The short upstream name, or None if the branch has none
        """
        output = await self._query(
            repo_path, ["rev-parse", "--abbrev-ref", f"{local_branch}@{{upstream}}"]
        )
        if output is None:
            return None

        ref = output.strip()
        # An unresolved "@{upstream}" must not be used as a start point
        return ref if ref and "@" not in ref else None
