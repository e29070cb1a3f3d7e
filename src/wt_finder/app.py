"""Command-line entry point for Git Worktree Finder."""

import argparse
import asyncio
import json
import logging
import os
import signal
import sys
from collections.abc import Sequence
from typing import TextIO

from . import __version__
from .models.result import MutationResult
from .services.branch_service import BranchService
from .services.config_manager import ConfigManager
from .services.discovery_service import WorktreeDiscoveryService, filter_worktrees
from .services.worktree_lister import WorktreeLister
from .services.worktree_service import WorktreeService
from .utils.cancellation import CancellationToken
from .utils.error_handler import classify_worktree_error, log_error
from .utils.exceptions import ConfigurationError
from .utils.logging_config import setup_logging

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CANCELLED = 130


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for all subcommands."""
    parser = argparse.ArgumentParser(
        prog="wt-finder",
        description="Find git worktrees across your project folders and manage them",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Show verbose output"
    )
    parser.add_argument(
        "--version", action="version", version=f"wt-finder {__version__}"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    list_parser = subparsers.add_parser("list", help="List worktrees, newest first")
    list_parser.add_argument(
        "--roots", nargs="*", help="Root folders to scan (default: from preferences)"
    )
    list_parser.add_argument("-q", "--query", default="", help="Filter by search words")
    list_parser.add_argument("--json", action="store_true", help="Print JSON")

    branches_parser = subparsers.add_parser("branches", help="List branch names")
    branches_parser.add_argument("repo", help="Repository path")

    create_parser = subparsers.add_parser(
        "create", help="Create a worktree from a base branch (Ctrl+C cancels)"
    )
    create_parser.add_argument("repo", help="Repository path")
    create_parser.add_argument("name", help="New branch / worktree name")
    create_parser.add_argument("--base", required=True, help="Base branch")
    create_parser.add_argument(
        "--path", help="Worktree folder (default: default_worktree_path/<name>)"
    )

    remove_parser = subparsers.add_parser("remove", help="Remove a linked worktree")
    remove_parser.add_argument("repo_root", help="Main repository path")
    remove_parser.add_argument("path", help="Worktree path")

    return parser


class WorktreeFinderApp:
    """Wires the services together and runs one command."""

    def __init__(
        self,
        config_manager: ConfigManager | None = None,
        discovery_service: WorktreeDiscoveryService | None = None,
        worktree_service: WorktreeService | None = None,
        branch_service: BranchService | None = None,
        lister: WorktreeLister | None = None,
        out: TextIO | None = None,
    ):
        self.config_manager = config_manager or ConfigManager()
        self.discovery = discovery_service or WorktreeDiscoveryService()
        self.worktrees = worktree_service or WorktreeService()
        self.branches = branch_service or BranchService()
        self.lister = lister or WorktreeLister()
        self.out = out or sys.stdout
        self.logger = logging.getLogger(__name__)

    def run(self, args: argparse.Namespace) -> int:
        """Run the parsed command and return the exit status."""
        handler = getattr(self, f"_cmd_{args.command}")
        return asyncio.run(handler(args))

    def _print(self, text: str = "", end: str = "\n") -> None:
        self.out.write(text + end)
        self.out.flush()

    def _report(self, result: MutationResult, success_message: str) -> int:
        if result.success:
            self._print(success_message)
            return EXIT_OK
        description = classify_worktree_error(result.error or "Unknown error")
        self._print(f"{description.title}: {description.message}")
        if description.message != result.error and not result.is_cancelled:
            self._print(f"\n{result.error}")
        return EXIT_CANCELLED if result.is_cancelled else EXIT_FAILURE

    async def _cmd_list(self, args: argparse.Namespace) -> int:
        roots = args.roots or self.config_manager.preferences.root_paths()
        if not roots:
            self._print("No root paths configured.")
            return EXIT_FAILURE

        items = filter_worktrees(await self.discovery.discover(roots), args.query)
        if args.json:
            self._print(json.dumps([item.to_dict() for item in items], indent=2))
            return EXIT_OK

        for item in items:
            main_marker = " · main" if item.is_main else ""
            self._print(f"{item.display_title}{main_marker}\t{item.path}")
        return EXIT_OK

    async def _cmd_branches(self, args: argparse.Namespace) -> int:
        for branch in await self.branches.list_branches(args.repo):
            self._print(branch)
        return EXIT_OK

    async def _cmd_create(self, args: argparse.Namespace) -> int:
        destination = args.path
        if not destination:
            try:
                destination = self.config_manager.preferences.worktree_destination(
                    args.name
                )
            except ConfigurationError as e:
                log_error(e, self.logger)
                self._print(f"{e.message}. {e.suggested_action or ''}".strip())
                return EXIT_FAILURE

        token = CancellationToken()
        loop = asyncio.get_running_loop()
        try:
            loop.add_signal_handler(signal.SIGINT, token.cancel)
        except (NotImplementedError, RuntimeError):
            pass  # Windows: Ctrl+C raises KeyboardInterrupt instead

        try:
            result = await self.worktrees.create_from_base(
                args.repo,
                args.name,
                destination,
                args.base,
                on_log=lambda text: self._print(text, end=""),
                token=token,
            )
        finally:
            try:
                loop.remove_signal_handler(signal.SIGINT)
            except (NotImplementedError, RuntimeError):
                pass

        return self._report(result, f"Worktree created at {destination}")

    async def _cmd_remove(self, args: argparse.Namespace) -> int:
        worktrees = await self.lister.list_worktrees(args.repo_root)
        target = os.path.abspath(args.path)
        main_path = worktrees[0].path if worktrees else None
        if main_path and os.path.realpath(main_path) == os.path.realpath(target):
            self._print("Refusing to remove the main worktree.")
            return EXIT_FAILURE

        result = await self.worktrees.remove(args.repo_root, target)
        return self._report(result, "Worktree removed")


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point for the application."""
    args = build_parser().parse_args(argv)
    setup_logging(level="INFO" if args.verbose else "WARNING")

    try:
        return WorktreeFinderApp().run(args)
    except KeyboardInterrupt:
        print("\nOperation cancelled by user", file=sys.stderr)
        return EXIT_CANCELLED


if __name__ == "__main__":
    sys.exit(main())
