"""Result types for git command runs and worktree mutations."""

from dataclasses import dataclass

CANCELLED_ERROR = "Cancelled"


@dataclass(frozen=True)
class CommandResult:
    """Captured outcome of a git command."""

    success: bool
    output: str = ""
    error: str = ""
    exit_code: int = 0


@dataclass(frozen=True)
class MutationResult:
    """
    Terminal outcome of a create or remove operation.

    ``error`` is git's diagnostic text (possibly several lines) on failure,
    or ``CANCELLED_ERROR`` when the caller cancelled the operation.
    """

    success: bool
    error: str | None = None

    @classmethod
    def ok(cls) -> "MutationResult":
        return cls(success=True)

    @classmethod
    def failure(cls, error: str) -> "MutationResult":
        return cls(success=False, error=error)

    @classmethod
    def cancelled(cls) -> "MutationResult":
        return cls(success=False, error=CANCELLED_ERROR)

    @property
    def is_cancelled(self) -> bool:
        return not self.success and self.error == CANCELLED_ERROR
