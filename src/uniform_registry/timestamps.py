"""Millisecond timestamps that never repeat within a process."""

from __future__ import annotations

import threading
import time
from typing import Callable


class MonotonicTimestamp:
    """Hand out strictly increasing millisecond timestamps.

    Record ids and upload file names are both derived from the wall clock.
    Two calls inside the same millisecond (or after the clock stepped back)
    get the previous value plus one instead of a duplicate.

    Args:
        clock: Returns the current time in seconds, ``time.time`` by default.
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._last = 0
        self._lock = threading.Lock()

    def next(self) -> int:
        with self._lock:
            now = int(self._clock() * 1000)
            self._last = max(now, self._last + 1)
            return self._last
