"""Cancellation token threaded through long-running operations."""

import threading

from sx.core.errors import OperationCancelledError


class CancelToken:
    """Cooperative cancellation signal.

    Long-running calls (archive extraction, version-query subprocesses) poll
    `raise_if_cancelled()` between units of work.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise OperationCancelledError("operation cancelled")

    def wait(self, timeout: float) -> bool:
        """Block up to `timeout` seconds; return True if cancelled meanwhile."""
        return self._event.wait(timeout)
