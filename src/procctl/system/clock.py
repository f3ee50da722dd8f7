"""
Time source used by every polling loop.

ProcessController never calls time.sleep directly; it goes through a Clock
so tests can substitute a fake one and run timeouts instantly.
"""

import time
from abc import ABC, abstractmethod


class Clock(ABC):
    """Monotonic time plus a blocking sleep."""

    @abstractmethod
    def monotonic(self) -> float:
        """Seconds on a monotonic scale."""

    @abstractmethod
    def sleep(self, seconds: float) -> None:
        """Block the calling thread for ``seconds``."""


class SystemClock(Clock):
    """Clock backed by the time module."""

    def monotonic(self) -> float:
        return time.monotonic()

    def sleep(self, seconds: float) -> None:
        if seconds > 0:
            time.sleep(seconds)
