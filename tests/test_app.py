"""Tests for the command-line interface."""

import io
import json
from unittest.mock import AsyncMock, Mock, patch

import pytest

from wt_finder.app import (
    EXIT_CANCELLED,
    EXIT_FAILURE,
    EXIT_OK,
    WorktreeFinderApp,
    build_parser,
    main,
)
from wt_finder.models.config import Preferences
from wt_finder.models.result import MutationResult
from wt_finder.models.worktree import WorktreeItem, WorktreeLine

from conftest import requires_git


def parse(*argv):
    return build_parser().parse_args(list(argv))


class TestBuildParser:
    """Test cases for argument parsing."""

    def test_list_defaults(self):
        args = parse("list")
        assert args.command == "list"
        assert args.roots is None
        assert args.query == ""
        assert not args.json
        assert not args.verbose

    def test_create(self):
        args = parse("-v", "create", "/repo", "feature/x", "--base", "main")
        assert args.verbose
        assert (args.repo, args.name, args.base, args.path) == (
            "/repo",
            "feature/x",
            "main",
            None,
        )

    def test_create_requires_base(self):
        with pytest.raises(SystemExit):
            parse("create", "/repo", "x")

    def test_command_required(self):
        with pytest.raises(SystemExit):
            parse()


class TestWorktreeFinderApp:
    """Test cases for WorktreeFinderApp with mocked services."""

    def setup_method(self):
        self.config = Mock()
        self.config.preferences = Preferences(
            roots="/code", default_worktree_path="/worktrees"
        )
        self.discovery = Mock()
        self.discovery.discover = AsyncMock(return_value=[])
        self.worktrees = Mock()
        self.worktrees.create_from_base = AsyncMock(return_value=MutationResult.ok())
        self.worktrees.remove = AsyncMock(return_value=MutationResult.ok())
        self.branches = Mock()
        self.branches.list_branches = AsyncMock(return_value=["develop", "main"])
        self.lister = Mock()
        self.lister.list_worktrees = AsyncMock(
            return_value=[WorktreeLine("/code/api", "main")]
        )
        self.out = io.StringIO()
        self.app = WorktreeFinderApp(
            self.config,
            self.discovery,
            self.worktrees,
            self.branches,
            self.lister,
            out=self.out,
        )

    def items(self):
        return [
            WorktreeItem("/code/api-login", "login", "api", False, "/code/api", 2.0),
            WorktreeItem("/code/api", "main", "api", True, "/code/api", 1.0),
        ]

    def test_list_uses_configured_roots(self):
        self.discovery.discover.return_value = self.items()

        assert self.app.run(parse("list")) == EXIT_OK

        self.discovery.discover.assert_awaited_once_with(["/code"])
        assert self.out.getvalue().splitlines() == [
            "api · login\t/code/api-login",
            "api · main · main\t/code/api",
        ]

    def test_list_json_with_query(self):
        self.discovery.discover.return_value = self.items()

        self.app.run(parse("list", "--roots", "/a", "/b", "--query", "login", "--json"))

        self.discovery.discover.assert_awaited_once_with(["/a", "/b"])
        data = json.loads(self.out.getvalue())
        assert [entry["path"] for entry in data] == ["/code/api-login"]
        assert data[0]["repoName"] == "api"

    def test_list_without_roots(self):
        self.config.preferences = Preferences()

        assert self.app.run(parse("list")) == EXIT_FAILURE
        self.discovery.discover.assert_not_awaited()

    def test_branches(self):
        assert self.app.run(parse("branches", "/code/api")) == EXIT_OK
        assert self.out.getvalue() == "develop\nmain\n"

    def test_create_streams_log(self):
        async def create(repo, name, path, base, on_log, token):
            on_log("Checking if branch exists…\n")
            return MutationResult.ok()

        self.worktrees.create_from_base = create

        status = self.app.run(
            parse("create", "/code/api", "login", "--base", "main", "--path", "/w/x")
        )

        assert status == EXIT_OK
        assert self.out.getvalue() == (
            "Checking if branch exists…\nWorktree created at /w/x\n"
        )

    def test_create_default_destination(self):
        self.app.run(parse("create", "/code/api", "feature/login", "--base", "main"))

        args = self.worktrees.create_from_base.await_args.args
        assert args == (
            "/code/api",
            "feature/login",
            "/worktrees/feature-login",
            "main",
        )

    def test_create_without_default_destination(self):
        self.config.preferences = Preferences()

        status = self.app.run(parse("create", "/code/api", "x", "--base", "main"))

        assert status == EXIT_FAILURE
        assert "Default worktree path is not set" in self.out.getvalue()
        self.worktrees.create_from_base.assert_not_awaited()

    def test_create_conflict_is_explained(self):
        error = "fatal: 'login' is already used by worktree at '/code/other'"
        self.worktrees.create_from_base.return_value = MutationResult.failure(error)

        status = self.app.run(parse("create", "/code/api", "login", "--base", "main"))

        assert status == EXIT_FAILURE
        output = self.out.getvalue()
        assert output.startswith("Branch already in use:")
        assert error in output

    def test_create_cancelled(self):
        self.worktrees.create_from_base.return_value = MutationResult.cancelled()

        status = self.app.run(parse("create", "/code/api", "x", "--base", "main"))

        assert status == EXIT_CANCELLED
        assert self.out.getvalue().startswith("Cancelled:")

    def test_remove_refuses_main_worktree(self):
        status = self.app.run(parse("remove", "/code/api", "/code/api"))

        assert status == EXIT_FAILURE
        assert "main worktree" in self.out.getvalue()
        self.worktrees.remove.assert_not_awaited()

    def test_remove_refuses_main_worktree_through_symlink(self, tmp_path):
        real = tmp_path / "api"
        real.mkdir()
        link = tmp_path / "api-link"
        link.symlink_to(real, target_is_directory=True)
        self.lister.list_worktrees.return_value = [WorktreeLine(str(real), "main")]

        status = self.app.run(parse("remove", str(real), str(link)))

        assert status == EXIT_FAILURE
        self.worktrees.remove.assert_not_awaited()

    def test_remove_linked_worktree(self):
        status = self.app.run(parse("remove", "/code/api", "/code/api-login"))

        assert status == EXIT_OK
        self.worktrees.remove.assert_awaited_once_with("/code/api", "/code/api-login")

    def test_remove_failure(self):
        self.worktrees.remove.return_value = MutationResult.failure("fatal: locked")

        status = self.app.run(parse("remove", "/code/api", "/code/api-login"))

        assert status == EXIT_FAILURE
        assert "Failed: fatal: locked" in self.out.getvalue()


class TestMain:
    """Test cases for the main entry point."""

    @pytest.fixture(autouse=True)
    def no_logging_setup(self):
        with patch("wt_finder.app.setup_logging") as setup:
            yield setup

    def test_verbose_sets_info_level(self, no_logging_setup):
        with patch.object(WorktreeFinderApp, "run", return_value=EXIT_OK):
            assert main(["-v", "list"]) == EXIT_OK
        no_logging_setup.assert_called_once_with(level="INFO")

    def test_keyboard_interrupt(self, capsys):
        with patch.object(WorktreeFinderApp, "run", side_effect=KeyboardInterrupt):
            assert main(["list"]) == EXIT_CANCELLED
        assert "Operation cancelled by user" in capsys.readouterr().err

    @requires_git
    def test_list_real_repository(self, repo_with_worktree, capsys):
        repo, worktree = repo_with_worktree

        status = main(["list", "--roots", str(repo.parent), "--json"])

        assert status == EXIT_OK
        data = json.loads(capsys.readouterr().out)
        assert {entry["branch"] for entry in data} == {"main", "feature"}
        assert sum(entry["isMain"] for entry in data) == 1
