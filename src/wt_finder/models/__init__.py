"""Data models for the Git Worktree Finder application."""

from .config import Preferences
from .result import CANCELLED_ERROR, CommandResult, MutationResult
from .worktree import DETACHED_BRANCH, RepositoryRecord, WorktreeItem, WorktreeLine

__all__ = [
    "CANCELLED_ERROR",
    "CommandResult",
    "DETACHED_BRANCH",
    "MutationResult",
    "Preferences",
    "RepositoryRecord",
    "WorktreeItem",
    "WorktreeLine",
]
