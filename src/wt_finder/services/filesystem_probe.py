"""Filesystem checks for git repositories and linked worktrees.

These helpers look at ``.git`` entries directly instead of asking git, so
scanning large directory trees stays cheap. Nothing is cached: the
filesystem can change between calls.
"""

import logging
import os

logger = logging.getLogger(__name__)

GITDIR_PREFIX = "gitdir:"


def _git_entry(directory: str) -> str:
    return os.path.join(directory, ".git")


def is_git_repository(directory: str) -> bool:
    """
    Check whether a directory is a main repository or a linked worktree.

    A ``.git`` directory marks a main repository. A ``.git`` file counts only
    if it starts with ``gitdir:``, as written by ``git worktree add``.
    """
    git_entry = _git_entry(directory)
    try:
        if os.path.isdir(git_entry):
            return True
        if not os.path.isfile(git_entry):
            return False
        with open(git_entry, encoding="utf-8") as f:
            return f.read(len(GITDIR_PREFIX)) == GITDIR_PREFIX
    except (OSError, UnicodeDecodeError) as e:
        logger.debug(f"Could not inspect {git_entry}: {e}")
        return False


def is_linked_worktree(directory: str) -> bool:
    """Check whether a directory's ``.git`` entry is a file (linked worktree)."""
    return os.path.isfile(_git_entry(directory))


def _read_gitdir(git_file: str) -> str | None:
    with open(git_file, encoding="utf-8") as f:
        content = f.read().strip()

    for line in content.splitlines():
        if line.startswith(GITDIR_PREFIX):
            value = line[len(GITDIR_PREFIX) :].strip()
            return value or None
    return None


def resolve_main_repository(worktree_dir: str) -> str | None:
    """
    Find the main repository a linked worktree belongs to.

    Follows the worktree's ``.git`` file to its private git dir, then that
    dir's ``commondir`` file (if any) to the git dir shared by all worktrees.
    The main repository is the parent of the shared git dir.

    Args:
        worktree_dir: Directory containing a ``.git`` file

    Returns:
        Absolute path of the main repository, or None if it cannot be resolved
    """
    git_file = _git_entry(worktree_dir)
    try:
        if not os.path.isfile(git_file):
            return None

        git_dir = _read_gitdir(git_file)
        if git_dir is None:
            return None
        if not os.path.isabs(git_dir):
            git_dir = os.path.join(os.path.dirname(git_file), git_dir)
        git_dir = os.path.normpath(os.path.abspath(git_dir))

        commondir_file = os.path.join(git_dir, "commondir")
        if os.path.exists(commondir_file):
            with open(commondir_file, encoding="utf-8") as f:
                common = f.read().strip()
            if not os.path.isabs(common):
                common = os.path.join(git_dir, common)
            return os.path.dirname(os.path.normpath(common))

        return os.path.dirname(git_dir)
    except (OSError, UnicodeDecodeError) as e:
        logger.debug(f"Could not resolve main repository for {worktree_dir}: {e}")
        return None
