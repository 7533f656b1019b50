"""No-activity timeout for browser sessions."""

import threading
import time


class ActivityTimeout:
    """Idle timer shared by the waiting thread and the request threads.

    The waiting thread arms it once the browser is told to load the page;
    every bridge event calls ``touch()``.
    """

    def __init__(self, timeout: float):
        self.timeout = timeout
        self._last_seen = None
        self._lock = threading.Lock()

    def touch(self) -> None:
        with self._lock:
            self._last_seen = time.monotonic()

    @property
    def idle_for(self) -> float:
        """Seconds since the last activity, 0 while unarmed."""
        with self._lock:
            last_seen = self._last_seen
        return 0.0 if last_seen is None else time.monotonic() - last_seen

    @property
    def expired(self) -> bool:
        return self.idle_for >= self.timeout
