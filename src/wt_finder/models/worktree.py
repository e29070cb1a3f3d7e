"""Repository and worktree data models for Git Worktree Finder."""

from dataclasses import dataclass
from pathlib import Path
from typing import Any

DETACHED_BRANCH = "(detached)"


@dataclass(frozen=True)
class RepositoryRecord:
    """
    A main (non-linked) Git repository found while scanning a root.

    Attributes:
        path: Absolute path of the repository's working directory
    """

    path: str

    @property
    def name(self) -> str:
        return Path(self.path).name


@dataclass(frozen=True)
class WorktreeLine:
    """
    One record parsed from ``git worktree list --porcelain``.

    Attributes:
        path: Worktree path exactly as git printed it
        branch: Short branch name, None for a detached HEAD
        is_bare: Whether git flagged the entry as bare
    """

    path: str
    branch: str | None = None
    is_bare: bool = False

    def __post_init__(self):
        if not self.path or not self.path.strip():
            raise ValueError("Worktree record is missing its path")


@dataclass(frozen=True)
class WorktreeItem:
    """
    A worktree as presented to callers after discovery.

    Attributes:
        path: Absolute path of the worktree
        branch: Checked-out branch, or ``(detached)``
        repo_name: Directory name of the owning repository
        is_main: Whether this is the repository's primary checkout
        repo_root: Absolute path of the owning repository
        last_modified_ms: Directory mtime in milliseconds, None if unreadable
    """

    path: str
    branch: str
    repo_name: str
    is_main: bool
    repo_root: str
    last_modified_ms: float | None = None

    @property
    def directory_name(self) -> str:
        return Path(self.path).name

    @property
    def parent_directory(self) -> str:
        return str(Path(self.path).parent)

    @property
    def display_title(self) -> str:
        return f"{self.repo_name} · {self.branch}"

    @property
    def is_detached(self) -> bool:
        return self.branch == DETACHED_BRANCH

    def sort_key(self) -> tuple[float, str]:
        """Most recently modified first, then by path."""
        return (-(self.last_modified_ms or 0), self.path)

    def matches(self, query: str) -> bool:
        """
        Check whether every word of a search query occurs in this worktree.

        Matching is case-insensitive over the repo name, branch, path, folder
        name, parent folder and the "repo branch" pair.
        """
        words = query.strip().lower().split()
        if not words:
            return True

        searchable = " ".join(
            [
                self.repo_name,
                self.branch,
                self.path,
                self.directory_name,
                self.parent_directory,
                f"{self.repo_name} {self.branch}",
            ]
        ).lower()
        return all(word in searchable for word in words)

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "branch": self.branch,
            "repoName": self.repo_name,
            "isMain": self.is_main,
            "repoRoot": self.repo_root,
            "lastModifiedMs": self.last_modified_ms,
        }
