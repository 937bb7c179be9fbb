import threading
import time
from collections.abc import Callable


class CancellationToken:
    """Cooperative cancellation flag shared between the caller and stage workers.

    Checked, never waited on, at stage boundaries and before each unit of
    item work. An optional deadline makes the token report as requested once
    it has passed. Callbacks registered with on_request fire once, on the
    thread that first observes the request.
    """

    def __init__(self, deadline_seconds: float | None = None) -> None:
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._callbacks: list[Callable[[], None]] = []
        self._deadline = (
            time.monotonic() + deadline_seconds if deadline_seconds is not None else None
        )

    def on_request(self, callback: Callable[[], None]) -> None:
        """Register a callback; runs immediately if already requested."""
        with self._lock:
            if not self._event.is_set():
                self._callbacks.append(callback)
                return
        callback()

    def request(self) -> None:
        with self._lock:
            if self._event.is_set():
                return
            self._event.set()
            callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            callback()

    def is_requested(self) -> bool:
        if self._event.is_set():
            return True
        if self._deadline is not None and time.monotonic() >= self._deadline:
            self.request()
            return True
        return False
