"""Utility helpers: paths, logging, errors and cancellation."""

from .cancellation import CancellationToken
from .exceptions import (
    ConfigurationError,
    ErrorCategory,
    ErrorSeverity,
    FileSystemError,
    GitError,
    PathError,
    RepositoryNotFoundError,
    ValidationError,
    WorktreeFinderError,
)
from .path_manager import PathManager

__all__ = [
    "CancellationToken",
    "ConfigurationError",
    "ErrorCategory",
    "ErrorSeverity",
    "FileSystemError",
    "GitError",
    "PathError",
    "PathManager",
    "RepositoryNotFoundError",
    "ValidationError",
    "WorktreeFinderError",
]
