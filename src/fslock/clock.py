"""Clock abstraction so lock timing can be simulated in tests."""

import threading
import time
from datetime import datetime, timezone
from typing import Protocol


class Clock(Protocol):
    """Source of the current time and of cancellable waits."""

    def now(self) -> datetime:
        """Return the current time as an aware UTC datetime."""
        ...

    def wait(self, seconds: float, cancel: threading.Event | None = None) -> bool:
        """Block for the given duration or until cancel is set.

        Returns:
            True if the wait was cancelled, False if the duration elapsed
        """
        ...


class WallClock:
    """Clock backed by the system time."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    def wait(self, seconds: float, cancel: threading.Event | None = None) -> bool:
        if cancel is not None:
            return cancel.wait(seconds)
        # sleep(0) still yields the GIL to other threads
        time.sleep(seconds)
        return False


WALL_CLOCK = WallClock()
