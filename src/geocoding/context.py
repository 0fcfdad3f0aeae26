"""
Request Context
--------------
Deadline and cancellation token passed explicitly into each lookup.
"""
import time
from threading import Lock
from typing import Callable, List, Optional

from src.geocoding.errors import DeadlineError, RequestCanceledError, RequestTimeoutError


class RequestContext:
    """
    Carries an optional absolute deadline and a cancellation flag.

    Callbacks registered with add_done_callback run once when cancel() is
    called, so a thread blocked on the upstream call can be woken up without
    polling. Deadlines are observed through remaining() and error().
    """

    def __init__(self, timeout: Optional[float] = None, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self.deadline = None if timeout is None else clock() + timeout
        self._cancelled = False
        self._callbacks: List[Callable[[], None]] = []
        self._lock = Lock()

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        with self._lock:
            if self._cancelled:
                return
            self._cancelled = True
            callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            callback()

    def add_done_callback(self, callback: Callable[[], None]) -> None:
        with self._lock:
            if not self._cancelled:
                self._callbacks.append(callback)
                return
        callback()

    def remove_done_callback(self, callback: Callable[[], None]) -> None:
        with self._lock:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

    def remaining(self) -> Optional[float]:
        """Seconds left before the deadline, or None when there is no deadline."""
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - self._clock())

    def error(self) -> Optional[DeadlineError]:
        if self._cancelled:
            return RequestCanceledError()
        if self.deadline is not None and self._clock() >= self.deadline:
            return RequestTimeoutError()
        return None

    def check(self) -> None:
        err = self.error()
        if err is not None:
            raise err
