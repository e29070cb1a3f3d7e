"""Cooperative cancellation token shared between a caller and an operation."""

import logging
import threading
from collections.abc import Callable

logger = logging.getLogger(__name__)


class CancellationToken:
    """
    One-way cancellation flag with one-shot callbacks.

    Operations poll ``is_cancelled`` at their checkpoints and register a
    callback to interrupt whatever they are waiting on (a running git process).
    ``cancel()`` may be called from any thread; callbacks run on the thread
    that cancels, so they must only hand work over to their own loop.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._cancelled = False
        self._callbacks: list[Callable[[], None]] = []

    @property
    def is_cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        """Cancel the token and fire every registered callback once."""
        with self._lock:
            if self._cancelled:
                return
            self._cancelled = True
            callbacks, self._callbacks = self._callbacks, []

        logger.debug(f"Cancellation requested ({len(callbacks)} callbacks)")
        for callback in callbacks:
            try:
                callback()
            except Exception as e:
                logger.warning(f"Cancellation callback failed: {e}")

    def add_callback(self, callback: Callable[[], None]) -> Callable[[], None]:
        """
        Register a callback to run when the token is cancelled.

        Runs the callback immediately if the token is already cancelled.

        Returns:
            Function that unregisters the callback
        """
        with self._lock:
            if not self._cancelled:
                self._callbacks.append(callback)
                return lambda: self._remove_callback(callback)

        callback()
        return lambda: None

    def _remove_callback(self, callback: Callable[[], None]) -> None:
        with self._lock:
            if callback in self._callbacks:
                self._callbacks.remove(callback)
