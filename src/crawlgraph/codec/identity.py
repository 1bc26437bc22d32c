"""Identifier and clock sources injected into the codec."""

from __future__ import annotations

import threading
import time
import uuid
from typing import Callable

IdFactory = Callable[[], str]
Clock = Callable[[], int]


def random_id() -> str:
    """Return a random 128-bit identifier."""
    return str(uuid.uuid4())


class SystemClock:
    """Wall clock in epoch milliseconds that never goes backwards in-process."""

    def __init__(self) -> None:
        self._last = 0
        self._lock = threading.Lock()

    def __call__(self) -> int:
        now = time.time_ns() // 1_000_000
        with self._lock:
            if now < self._last:
                now = self._last
            self._last = now
        return now
