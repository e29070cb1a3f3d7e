"""Tests for BranchService."""

from unittest.mock import AsyncMock

import pytest

from wt_finder.models.result import CommandResult
from wt_finder.services.branch_service import BranchService
from wt_finder.utils.exceptions import GitError

from conftest import git, requires_git


def ok(output=""):
    return CommandResult(success=True, output=output)


def failed(error="fatal: error", exit_code=128):
    return CommandResult(success=False, error=error, exit_code=exit_code)


class TestBranchService:
    """Test cases for BranchService with a mocked runner."""

    @pytest.fixture(autouse=True)
    def make_service(self, tmp_path):
        (tmp_path / ".git").mkdir()
        self.repo = str(tmp_path)
        self.runner = AsyncMock()
        self.service = BranchService(self.runner)

    @pytest.mark.asyncio
    async def test_list_branches_collapses_remotes(self):
        self.runner.run.return_value = ok(
            "main\nfeature\norigin/HEAD\norigin/main\nupstream/main\n"
            "origin/release\nremotes/fork/topic\nHEAD\n\n"
        )

        branches = await self.service.list_branches(self.repo)

        assert branches == ["feature", "main", "release", "topic"]
        self.runner.run.assert_awaited_once_with(
            ["branch", "-a", "--format=%(refname:short)"], cwd=self.repo
        )

    @pytest.mark.asyncio
    async def test_list_branches_failure(self):
        self.runner.run.side_effect = GitError("boom")
        assert await self.service.list_branches(self.repo) == []

    @pytest.mark.asyncio
    async def test_not_a_repository(self, tmp_path):
        plain = tmp_path / "plain"
        plain.mkdir()

        assert await self.service.list_branches(str(plain)) == []
        assert not await self.service.has_local_branch(str(plain), "main")
        assert await self.service.default_remote(str(plain)) is None
        assert await self.service.upstream_ref(str(plain), "main") is None
        self.runner.run.assert_not_called()

    @pytest.mark.asyncio
    async def test_has_local_branch(self):
        self.runner.run.return_value = ok("abc123\n")
        assert await self.service.has_local_branch(self.repo, "feature")
        self.runner.run.assert_awaited_once_with(
            ["rev-parse", "--verify", "refs/heads/feature"], cwd=self.repo
        )

        self.runner.run.return_value = failed()
        assert not await self.service.has_local_branch(self.repo, "feature")

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "output, expected",
        [
            ("upstream\norigin\n", "origin"),
            ("fork\nupstream\n", "fork"),
            ("", None),
        ],
    )
    async def test_default_remote(self, output, expected):
        self.runner.run.return_value = ok(output)
        assert await self.service.default_remote(self.repo) == expected

    @pytest.mark.asyncio
    async def test_upstream_ref(self):
        self.runner.run.return_value = ok("origin/main\n")
        assert await self.service.upstream_ref(self.repo, "main") == "origin/main"
        self.runner.run.assert_awaited_once_with(
            ["rev-parse", "--abbrev-ref", "main@{upstream}"], cwd=self.repo
        )

    @pytest.mark.asyncio
    async def test_upstream_ref_rejects_unresolved_placeholder(self):
        self.runner.run.return_value = ok("main@{upstream}\n")
        assert await self.service.upstream_ref(self.repo, "main") is None

    @pytest.mark.asyncio
    async def test_upstream_ref_without_upstream(self):
        self.runner.run.return_value = failed("fatal: no upstream configured")
        assert await self.service.upstream_ref(self.repo, "main") is None


@requires_git
class TestBranchServiceIntegration:
    """BranchService against a real repository."""

    @pytest.mark.asyncio
    async def test_real_branches(self, repo):
        git(repo, "branch", "develop")
        service = BranchService()

        assert await service.list_branches(str(repo)) == ["develop", "main"]
        assert await service.has_local_branch(str(repo), "develop")
        assert not await service.has_local_branch(str(repo), "nope")
        assert await service.default_remote(str(repo)) is None
        assert await service.upstream_ref(str(repo), "main") is None
