"""
Pacing of calls to the RoR API.

RoR does not publish a strict quota for the affiliation endpoint, so the
default pace is deliberately slow. The limiter is shared by all resolver
workers: the interval applies to the process, not to each thread.
"""

import threading
import time
from typing import Callable


class RateLimiter:
    """Guarantees at least ``interval`` seconds between two acquisitions."""

    def __init__(
        self,
        interval: float,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if interval < 0:
            raise ValueError("interval must not be negative")
        self.interval = interval
        self._clock = clock
        self._sleep = sleep
        self._lock = threading.Lock()
        self._last = None

    def acquire(self) -> float:
        """Block until a request may go out. Returns the time waited."""
        with self._lock:
            waited = 0.0
            if self._last is not None:
                elapsed = self._clock() - self._last
                if elapsed < self.interval:
                    waited = self.interval - elapsed
                    self._sleep(waited)
            self._last = self._clock()
            return waited


class NoOpLimiter:
    """Limiter that never waits."""

    def acquire(self) -> float:
        return 0.0
