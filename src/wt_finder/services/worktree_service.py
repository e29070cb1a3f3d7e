"""Worktree creation and removal for Git Worktree Finder."""

import asyncio
import logging
import os

from ..models.result import CommandResult, MutationResult
from ..utils.cancellation import CancellationToken
from ..utils.exceptions import (
    FileSystemError,
    GitError,
    RepositoryNotFoundError,
    ValidationError,
    WorktreeFinderError,
)
from ..utils.path_manager import PathManager
from .branch_service import DEFAULT_REMOTE, BranchService
from .filesystem_probe import is_git_repository
from .git_runner import GitRunner, LogCallback, describe_command

logger = logging.getLogger(__name__)


def _failure_text(args: list[str], result: CommandResult) -> str:
    parts = [
        f"Command failed: {describe_command(args)} (exit {result.exit_code})",
        result.error,
        result.output.strip(),
    ]
    return "\n".join(part for part in parts if part).strip()


class WorktreeService:
    """
    Creates and removes worktrees.

    Expected failures are returned as a MutationResult rather than raised.
    Callers must not run two operations on the same repository at once.
    """

    def __init__(
        self,
        runner: GitRunner | None = None,
        branch_service: BranchService | None = None,
    ):
        """
        Initialize the worktree service.

        Args:
            runner: Git runner used for all commands
            branch_service: Branch queries (shares ``runner`` if omitted)
        """
        self._runner = runner or GitRunner()
        self._branches = branch_service or BranchService(self._runner)

    @staticmethod
    def _require_repository(repo_path: str) -> str:
        if not repo_path or not os.path.exists(repo_path):
            raise RepositoryNotFoundError(repo_path)
        if not is_git_repository(repo_path):
            raise RepositoryNotFoundError(repo_path)
        return os.path.abspath(repo_path)

    async def create_from_base(
        self,
        repo_path: str,
        new_branch_name: str,
        worktree_path: str,
        base_branch: str,
        on_log: LogCallback | None = None,
        token: CancellationToken | None = None,
    ) -> MutationResult:
        """
        Create a worktree for a branch, creating the branch from a base if needed.

        An existing local branch is attached as-is. Otherwise the branch is
        created from the base branch's upstream (or the base branch itself)
        and then pointed at ``origin/<branch>`` for pushing.

        Args:
            repo_path: Path to the repository
            new_branch_name: Branch/worktree name; ``/`` and ``\\`` become ``-``
            worktree_path: Destination folder (relative to the repo's parent)
            base_branch: Branch to start a new branch from
            on_log: Receives progress text and git output
            token: Cancellation token checked between steps

        Returns:
            MutationResult: ok, failure with a diagnostic, or cancelled
        """

        def log(text: str) -> None:
            if on_log is not None:
                on_log(text)

        def cancelled() -> bool:
            return token is not None and token.is_cancelled

        try:
            abs_repo = self._require_repository(repo_path)
            base = (base_branch or "").strip()
            if not base:
                raise ValidationError("Base branch is required", field="base_branch")
            branch = PathManager.sanitize_worktree_name(new_branch_name)
            if not branch:
                raise ValidationError(
                    "Worktree name is required", field="new_branch_name"
                )
        except WorktreeFinderError as e:
            logger.warning(f"Cannot create worktree: {e.message}")
            return MutationResult.failure(e.message)

        abs_worktree = PathManager.resolve_worktree_path(worktree_path, abs_repo)

        if cancelled():
            return MutationResult.cancelled()
        log("Checking if branch exists…\n")
        branch_exists = await self._branches.has_local_branch(abs_repo, branch)

        if cancelled():
            return MutationResult.cancelled()
        if branch_exists:
            log(f"Adding worktree at {abs_worktree} (existing branch {branch})…\n")
            result = await self._runner.stream(
                ["worktree", "add", abs_worktree, branch], abs_repo, on_log, token
            )
            self._log_outcome("attach", abs_worktree, result)
            return result

        start_point = await self._branches.upstream_ref(abs_repo, base) or base
        if cancelled():
            return MutationResult.cancelled()
        if start_point != base:
            log(f'Creating branch "{branch}" from {start_point} at {abs_worktree}…\n')
        else:
            log(f'Creating branch "{branch}" and worktree at {abs_worktree}…\n')

        result = await self._runner.stream(
            ["worktree", "add", "-b", branch, abs_worktree, start_point],
            abs_repo,
            on_log,
            token,
        )
        self._log_outcome("create", abs_worktree, result)
        if result.success:
            await self._configure_upstream(abs_worktree, branch, on_log)
        return result

    async def create(
        self, repo_path: str, branch: str, worktree_path: str
    ) -> MutationResult:
        """
        Create a worktree for a branch without a separate base branch.

        An existing local branch is attached. Otherwise the branch is created
        from ``<default remote>/<branch>``, or from ``branch`` when the
        repository has no remote.
        """
        try:
            abs_repo = self._require_repository(repo_path)
        except RepositoryNotFoundError as e:
            return MutationResult.failure(e.message)

        branch_name = (branch or "").strip()
        if not branch_name:
            return MutationResult.failure("Branch is required")
        abs_worktree = PathManager.resolve_worktree_path(worktree_path, abs_repo)

        if await self._branches.has_local_branch(abs_repo, branch_name):
            args = ["worktree", "add", abs_worktree, branch_name]
        else:
            remote = await self._branches.default_remote(abs_repo)
            start_point = f"{remote}/{branch_name}" if remote else branch_name
            args = ["worktree", "add", "-b", branch_name, abs_worktree, start_point]

        return await self._run_mutation(args, abs_repo)

    async def remove(self, repo_root: str, worktree_path: str) -> MutationResult:
        """
        Unregister a worktree and delete its folder.

        Must not be used on a repository's main worktree. Files git leaves
        behind are moved to the trash rather than deleted.

        Args:
            repo_root: Main repository the worktree belongs to
            worktree_path: Worktree to remove; relative paths are taken from
                ``repo_root``, as git does
        """
        if not os.path.isabs(worktree_path):
            worktree_path = os.path.normpath(
                os.path.join(os.path.abspath(repo_root), worktree_path)
            )
        result = await self._run_mutation(
            ["worktree", "remove", worktree_path, "--force"], repo_root
        )
        if not result.success:
            return result

        if os.path.exists(worktree_path):
            logger.info(f"Moving leftover folder to trash: {worktree_path}")
            try:
                await asyncio.to_thread(PathManager.move_to_trash, worktree_path)
            except FileSystemError as e:
                logger.error(e.message)
                return MutationResult.failure(e.message)

        logger.info(f"Removed worktree at {worktree_path}")
        return MutationResult.ok()

    async def _run_mutation(self, args: list[str], cwd: str) -> MutationResult:
        try:
            result = await self._runner.run(args, cwd=cwd)
        except GitError as e:
            logger.error(f"{describe_command(args)} failed: {e.message}")
            parts = [e.message, e.stderr]
            return MutationResult.failure("\n".join(p for p in parts if p))

        if not result.success:
            message = _failure_text(args, result)
            logger.warning(message)
            return MutationResult.failure(message)
        return MutationResult.ok()

    async def _configure_upstream(
        self, worktree_path: str, branch: str, on_log: LogCallback | None
    ) -> None:
        """
        Point a new branch at ``origin/<branch>`` so pushing works.

        Advisory only: failure is reported through ``on_log`` and never
        changes the creation result.
        """
        upstream = f"{DEFAULT_REMOTE}/{branch}"
        attempts = [
            [["branch", f"--set-upstream-to={upstream}", branch]],
            # origin/<branch> usually does not exist yet; write the config directly
            [
                ["config", f"branch.{branch}.remote", DEFAULT_REMOTE],
                ["config", f"branch.{branch}.merge", f"refs/heads/{branch}"],
            ],
        ]

        first_error = ""
        for commands in attempts:
            error = await self._run_all(commands, worktree_path)
            if not error:
                if on_log is not None:
                    on_log(
                        f"Upstream set to {upstream} "
                        "(push will work from the worktree).\n"
                    )
                return
            first_error = first_error or error

        logger.info(f"Could not set upstream for {branch}: {first_error}")
        if on_log is not None:
            on_log(
                f"Note: could not set upstream ({first_error}). "
                f'Run "git push -u {DEFAULT_REMOTE} {branch}" once in the worktree.\n'
            )

    async def _run_all(self, commands: list[list[str]], cwd: str) -> str:
        """Run commands in order; return the first error text, or "" if all pass."""
        for args in commands:
            try:
                result = await self._runner.run(args, cwd=cwd)
            except GitError as e:
                return e.message
            if not result.success:
                fallback = f"{describe_command(args)} exited with {result.exit_code}"
                return result.error or fallback
        return ""

    @staticmethod
    def _log_outcome(action: str, path: str, result: MutationResult) -> None:
        if result.success:
            logger.info(f"Worktree {action} succeeded at {path}")
        elif result.is_cancelled:
            logger.info(f"Worktree {action} cancelled at {path}")
        else:
            logger.warning(f"Worktree {action} failed at {path}: {result.error}")
