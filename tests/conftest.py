"""Shared fixtures: real git repositories built in a temporary directory."""

import os
import shutil
import subprocess
from pathlib import Path

import pytest

# No display is needed for the Qt tests
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

requires_git = pytest.mark.skipif(
    shutil.which("git") is None, reason="git is not installed"
)

_GIT_ENV = {
    "GIT_AUTHOR_NAME": "Test",
    "GIT_AUTHOR_EMAIL": "test@example.com",
    "GIT_COMMITTER_NAME": "Test",
    "GIT_COMMITTER_EMAIL": "test@example.com",
    "GIT_CONFIG_NOSYSTEM": "1",
}


def git(cwd, *args, check: bool = True) -> str:
    """Run git in ``cwd`` and return its stdout; fails the test on error."""
    result = subprocess.run(
        ["git", *args],
        cwd=str(cwd),
        capture_output=True,
        text=True,
        env={**os.environ, **_GIT_ENV},
        check=check,
    )
    return result.stdout


def make_repo(path: Path, branch: str = "main") -> Path:
    """Create a repository with one commit on ``branch``."""
    path.mkdir(parents=True, exist_ok=True)
    git(path, "init", "-q")
    git(path, "symbolic-ref", "HEAD", f"refs/heads/{branch}")
    (path / "README.md").write_text("hello\n")
    git(path, "add", "README.md")
    git(path, "commit", "-q", "-m", "initial")
    return path


@pytest.fixture
def repo(tmp_path):
    """A main repository at ``<tmp>/code/project`` on branch ``main``."""
    return make_repo(tmp_path / "code" / "project")


@pytest.fixture
def repo_with_worktree(repo):
    """The ``repo`` fixture plus a linked worktree on branch ``feature``."""
    worktree = repo.parent / "project-feature"
    git(repo, "worktree", "add", "-q", "-b", "feature", str(worktree))
    return repo, worktree


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    """Keep preferences, logs and env overrides out of the real home."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("USERPROFILE", str(home))
    monkeypatch.delenv("WT_FINDER_ROOTS", raising=False)
    return home
