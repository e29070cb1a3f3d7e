"""Turn raw worktree failures into messages a person can act on."""

import logging
import re
from dataclasses import dataclass

from ..models.result import CANCELLED_ERROR
from .exceptions import ErrorCategory, WorktreeFinderError

logger = logging.getLogger(__name__)

_BRANCH_IN_USE = re.compile(r"'([^']+)' is already used by worktree at '([^']+)'")
_BRANCH_EXISTS = re.compile(r"a branch named .+ already exists", re.IGNORECASE)
_PATH_EXISTS = re.compile(r"already exists|already checked out", re.IGNORECASE)


@dataclass(frozen=True)
class ErrorDescription:
    """Title/message pair for presenting a failed worktree operation."""

    title: str
    message: str
    category: ErrorCategory


def classify_worktree_error(full_error: str) -> ErrorDescription:
    """
    Classify git's diagnostic text for a failed ``worktree add``.

    Git offers no structured error codes, so this matches on its English
    messages. The full text should always stay available to the user.

    Args:
        full_error: Complete error text from a MutationResult

    Returns:
        ErrorDescription with a short title and a suggested remedy
    """
    if full_error == CANCELLED_ERROR:
        return ErrorDescription(
            "Cancelled", "The operation was cancelled.", ErrorCategory.CANCELLED
        )

    in_use = _BRANCH_IN_USE.search(full_error)
    if in_use:
        branch, existing_path = in_use.groups()
        return ErrorDescription(
            "Branch already in use",
            f'"{branch}" is checked out at:\n{existing_path}\n\n'
            "Use another branch, or remove that worktree first "
            "(e.g. `git worktree remove` there).",
            ErrorCategory.CONFLICT,
        )

    if _BRANCH_EXISTS.search(full_error):
        return ErrorDescription(
            "Branch name already exists",
            "A branch with that name already exists. Choose another worktree name.",
            ErrorCategory.CONFLICT,
        )

    if _PATH_EXISTS.search(full_error):
        return ErrorDescription(
            "Worktree already exists",
            "A worktree at that path already exists. Choose another worktree "
            "name or remove the existing folder first.",
            ErrorCategory.CONFLICT,
        )

    return ErrorDescription("Failed", full_error, ErrorCategory.GIT_OPERATION)


def log_error(error: WorktreeFinderError, log: logging.Logger | None = None) -> None:
    """Log an application error with its structured details."""
    log = log or logger
    error_dict = error.to_dict()
    if error.category in (ErrorCategory.VALIDATION, ErrorCategory.CANCELLED):
        log.warning(f"{error.message} {error_dict['details']}")
    else:
        log.error(
            f"{error.__class__.__name__}: {error.message}",
            extra={"error_details": error_dict},
        )
