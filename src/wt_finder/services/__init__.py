"""Service layer: discovery, branch queries and worktree operations."""

from .async_worktree_service import AsyncWorktreeService, OperationResult, OperationType
from .branch_service import BranchService
from .config_manager import ConfigManager
from .discovery_service import (
    WorktreeDiscoveryService,
    filter_worktrees,
    sort_worktrees,
)
from .git_runner import GitRunner
from .repository_scanner import RepositoryScanner
from .worktree_lister import WorktreeLister, parse_worktree_porcelain
from .worktree_service import WorktreeService

__all__ = [
    "AsyncWorktreeService",
    "BranchService",
    "ConfigManager",
    "GitRunner",
    "OperationResult",
    "OperationType",
    "RepositoryScanner",
    "WorktreeDiscoveryService",
    "WorktreeLister",
    "WorktreeService",
    "filter_worktrees",
    "parse_worktree_porcelain",
    "sort_worktrees",
]
