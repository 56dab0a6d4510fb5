"""Liveness heartbeat for a held lock.

While a lock is held, a background thread keeps the holder's
``alive.<pid>`` marker fresh. Other processes compare the marker's
modification time against their lividity timeout to decide whether the
holder is still running.
"""

import logging
import threading
from pathlib import Path

from ..clock import WALL_CLOCK, Clock
from .fileutil import refresh_marker

logger = logging.getLogger(__name__)


class Heartbeat:
    """Refreshes a liveness marker on a fixed interval until stopped.

    A Heartbeat is single use: start() may be called once, and stop()
    blocks until the background thread has exited.
    """

    def __init__(self, marker: Path, interval: float, clock: Clock = WALL_CLOCK) -> None:
        self.marker = marker
        self.interval = interval
        self._clock = clock
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        """Whether the background thread is still alive."""
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Write the marker and start refreshing it.

        Raises:
            RuntimeError: If this heartbeat was already started
            OSError: If the marker cannot be written
        """
        if self._thread is not None:
            raise RuntimeError(f"Heartbeat for {self.marker} already started")
        self.marker.touch(exist_ok=True)
        refresh_marker(self.marker, self._clock.now())
        self._thread = threading.Thread(
            target=self._run,
            name=f"fslock-heartbeat-{self.marker.parent.name}",
            daemon=True,
        )
        self._thread.start()

    def stop(self) -> None:
        """Signal the thread to stop and wait for it to exit."""
        self._stop.set()
        if self._thread is not None:
            self._thread.join()

    def _run(self) -> None:
        while not self._clock.wait(self.interval, self._stop):
            try:
                refresh_marker(self.marker, self._clock.now())
            except FileNotFoundError:
                logger.warning("Liveness marker %s vanished; lock was broken", self.marker)
                return
            except OSError as e:
                logger.warning("Failed to refresh liveness marker %s: %s", self.marker, e)
