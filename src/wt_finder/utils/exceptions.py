"""Exception hierarchy for Git Worktree Finder.

Every error carries a category used to classify it, a severity used when
logging it, and a ``details`` dict with structured context for the logs.
"""

from enum import Enum
from typing import Any


class ErrorSeverity(Enum):
    """How loudly an error is reported."""

    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(Enum):
    """Kinds of failure the application distinguishes."""

    NOT_FOUND = "not_found"
    VALIDATION = "validation"
    CONFLICT = "conflict"
    GIT_OPERATION = "git_operation"
    CANCELLED = "cancelled"
    FILE_SYSTEM = "file_system"
    CONFIGURATION = "configuration"


class WorktreeFinderError(Exception):
    """
    Base exception for Git Worktree Finder.

    Subclasses set ``category`` and ``severity`` as class attributes and
    record their context with ``_attach``.
    """

    category = ErrorCategory.GIT_OPERATION
    severity = ErrorSeverity.ERROR

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        user_message: str | None = None,
        suggested_action: str | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = dict(details or {})
        self.user_message = user_message or message
        self.suggested_action = suggested_action

    def _attach(self, **context: Any) -> None:
        """Keep context values as attributes and in ``details``."""
        for key, value in context.items():
            setattr(self, key, value)
        self.details.update(context)

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging."""
        return {
            "type": type(self).__name__,
            "message": self.message,
            "category": self.category.value,
            "severity": self.severity.value,
            "details": self.details,
            "user_message": self.user_message,
            "suggested_action": self.suggested_action,
        }


class GitError(WorktreeFinderError):
    """The git executable could not be run, timed out or overflowed its buffer."""

    def __init__(
        self,
        message: str,
        command: str | None = None,
        exit_code: int | None = None,
        stderr: str | None = None,
        **kwargs,
    ):
        super().__init__(message, **kwargs)
        self._attach(command=command, exit_code=exit_code, stderr=stderr)


class ValidationError(WorktreeFinderError):
    """Required input is missing or malformed."""

    category = ErrorCategory.VALIDATION
    severity = ErrorSeverity.WARNING

    def __init__(
        self, message: str, field: str | None = None, value: Any = None, **kwargs
    ):
        super().__init__(message, **kwargs)
        self._attach(field=field, value=None if value is None else str(value))


class RepositoryNotFoundError(WorktreeFinderError):
    """A repository path is missing or is not a git repository."""

    category = ErrorCategory.NOT_FOUND

    def __init__(self, path: str, **kwargs):
        super().__init__("Repository not found", **kwargs)
        self._attach(path=path)


class ConfigurationError(WorktreeFinderError):
    """Preferences are unreadable or incomplete."""

    category = ErrorCategory.CONFIGURATION

    def __init__(self, message: str, config_file: str | None = None, **kwargs):
        super().__init__(message, **kwargs)
        self._attach(config_file=config_file)


class FileSystemError(WorktreeFinderError):
    """A filesystem operation on a worktree folder failed."""

    category = ErrorCategory.FILE_SYSTEM

    def __init__(
        self,
        message: str,
        path: str | None = None,
        operation: str | None = None,
        **kwargs,
    ):
        super().__init__(message, **kwargs)
        self._attach(path=path, operation=operation)


class PathError(FileSystemError):
    """An application directory could not be created."""

    def __init__(self, message: str, path: str | None = None, **kwargs):
        super().__init__(message, path=path, operation="mkdir", **kwargs)
