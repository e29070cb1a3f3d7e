"""Git Worktree Finder: discover and manage git worktrees across project folders."""

__version__ = "0.1.0"
