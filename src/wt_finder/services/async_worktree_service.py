"""Qt front door for discovery and worktree operations, run on QThreads."""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable, Iterable
from enum import Enum
from typing import Any

from PyQt6.QtCore import QObject, QThread, pyqtSignal

from ..models.result import MutationResult
from ..utils.cancellation import CancellationToken
from .discovery_service import WorktreeDiscoveryService
from .git_runner import LogCallback
from .worktree_service import WorktreeService

logger = logging.getLogger(__name__)

OperationFactory = Callable[[CancellationToken, LogCallback], Awaitable[Any]]


class OperationType(Enum):
    """Types of operations that can be performed asynchronously."""

    DISCOVER = "discover"
    CREATE_WORKTREE = "create_worktree"
    REMOVE_WORKTREE = "remove_worktree"


class OperationResult:
    """Result of an asynchronous operation."""

    def __init__(
        self,
        operation_type: OperationType,
        success: bool,
        data: Any = None,
        error: str = "",
        operation_id: str = "",
    ):
        self.operation_type = operation_type
        self.success = success
        self.data = data
        self.error = error
        self.operation_id = operation_id
        self.timestamp = time.time()

    @property
    def is_cancelled(self) -> bool:
        return isinstance(self.data, MutationResult) and self.data.is_cancelled


class OperationWorker(QObject):
    """
    Runs one operation to completion on its own event loop.

    The worker lives on a QThread; output and the final result are reported
    through signals, which Qt delivers on the receiver's thread.
    """

    log = pyqtSignal(str)
    finished = pyqtSignal(object)  # OperationResult

    def __init__(
        self,
        operation_type: OperationType,
        factory: OperationFactory,
        operation_id: str,
    ):
        super().__init__()
        self.operation_type = operation_type
        self.operation_id = operation_id
        self.token = CancellationToken()
        self._factory = factory

    def cancel(self) -> None:
        """Cancel the operation; a running git process is terminated."""
        self.token.cancel()
        logger.info(f"Operation {self.operation_id} cancelled by user")

    def run(self) -> None:
        """Run the operation and emit ``finished`` with its result."""
        try:
            outcome = asyncio.run(self._factory(self.token, self.log.emit))
        except Exception as e:
            logger.exception(f"Operation {self.operation_id} crashed")
            result = OperationResult(
                self.operation_type,
                success=False,
                error=str(e),
                operation_id=self.operation_id,
            )
        else:
            result = self._to_result(outcome)
        self.finished.emit(result)

    def _to_result(self, outcome: Any) -> OperationResult:
        if isinstance(outcome, MutationResult):
            return OperationResult(
                self.operation_type,
                success=outcome.success,
                data=outcome,
                error=outcome.error or "",
                operation_id=self.operation_id,
            )
        return OperationResult(
            self.operation_type,
            success=True,
            data=outcome,
            operation_id=self.operation_id,
        )


class AsyncWorktreeService(QObject):
    """
    Runs discovery, creation and removal in the background for a Qt UI.

    Each operation gets its own QThread and cancellation token. Discovery
    ignores cancellation; creation stops at its next checkpoint.
    """

    operation_started = pyqtSignal(str, str)  # operation_type, operation_id
    operation_log = pyqtSignal(str, str)  # operation_id, text
    operation_finished = pyqtSignal(object)  # OperationResult

    def __init__(
        self,
        discovery_service: WorktreeDiscoveryService | None = None,
        worktree_service: WorktreeService | None = None,
    ):
        super().__init__()
        self._discovery = discovery_service or WorktreeDiscoveryService()
        self._worktrees = worktree_service or WorktreeService()
        self._active_operations: dict[str, tuple[QThread, OperationWorker]] = {}
        self._operation_counter = 0

    def _generate_operation_id(self) -> str:
        """Generate a unique operation ID."""
        self._operation_counter += 1
        return f"wt_op_{self._operation_counter}_{int(time.time())}"

    def _start_operation(
        self, operation_type: OperationType, factory: OperationFactory
    ) -> str:
        operation_id = self._generate_operation_id()

        worker = OperationWorker(operation_type, factory, operation_id)
        thread = QThread()
        worker.moveToThread(thread)

        worker.log.connect(lambda text: self.operation_log.emit(operation_id, text))
        worker.finished.connect(self._on_operation_finished)
        thread.started.connect(worker.run)

        self._active_operations[operation_id] = (thread, worker)
        thread.start()
        self.operation_started.emit(operation_type.value, operation_id)

        logger.info(f"Started {operation_type.value} operation with ID: {operation_id}")
        return operation_id

    def _on_operation_finished(self, result: OperationResult) -> None:
        operation = self._active_operations.pop(result.operation_id, None)
        if operation is not None:
            thread, _ = operation
            thread.quit()
            thread.wait()

        self.operation_finished.emit(result)
        logger.info(
            f"Completed {result.operation_type.value} operation "
            f"(ID: {result.operation_id}, Success: {result.success})"
        )

    def discover_async(self, roots: Iterable[str]) -> str:
        """Discover all worktrees below ``roots``; data is a list of WorktreeItem."""
        roots = list(roots)
        return self._start_operation(
            OperationType.DISCOVER,
            lambda token, log: self._discovery.discover(roots),
        )

    def create_from_base_async(
        self,
        repo_path: str,
        new_branch_name: str,
        worktree_path: str,
        base_branch: str,
    ) -> str:
        """Create a worktree in the background, streaming git output as logs."""
        return self._start_operation(
            OperationType.CREATE_WORKTREE,
            lambda token, log: self._worktrees.create_from_base(
                repo_path,
                new_branch_name,
                worktree_path,
                base_branch,
                on_log=log,
                token=token,
            ),
        )

    def remove_worktree_async(self, repo_root: str, worktree_path: str) -> str:
        """Remove a (non-main) worktree in the background."""
        return self._start_operation(
            OperationType.REMOVE_WORKTREE,
            lambda token, log: self._worktrees.remove(repo_root, worktree_path),
        )

    def cancel_operation(self, operation_id: str) -> bool:
        """
        Request cancellation of an active operation.

        The operation still finishes through ``operation_finished``.

        Returns:
            bool: True if the operation was found
        """
        operation = self._active_operations.get(operation_id)
        if operation is None:
            return False
        _, worker = operation
        worker.cancel()
        return True

    def get_active_operations(self) -> list[str]:
        return list(self._active_operations.keys())

    def is_operation_active(self, operation_id: str) -> bool:
        return operation_id in self._active_operations

    def shutdown(self) -> None:
        """Cancel every operation and wait for the threads to stop."""
        for thread, worker in list(self._active_operations.values()):
            worker.cancel()
            thread.quit()
            thread.wait()
        self._active_operations.clear()
        logger.info("AsyncWorktreeService shutdown complete")
