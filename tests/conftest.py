"""Shared test fixtures for fslock tests."""

import logging
import threading
import time
from collections.abc import Callable, Generator
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from typer.testing import CliRunner

from fslock import HeldRecord, Lock, LockConfig

# Far above any default pid_max, so never a live process
DEAD_PID = 2**30


class FastClock:
    """Real time, but every wait is capped at a millisecond."""

    def __init__(self) -> None:
        self.waits: list[float] = []

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    def wait(self, seconds: float, cancel: threading.Event | None = None) -> bool:
        self.waits.append(seconds)
        if cancel is not None:
            return cancel.wait(min(seconds, 0.001))
        time.sleep(min(seconds, 0.001))
        return False


class ManualClock:
    """Simulated time that only moves on foreground waits or advance().

    Waits with a cancel event (heartbeats) return after a real millisecond
    without moving time.
    """

    def __init__(self, start: datetime | None = None) -> None:
        self._now = start or datetime.now(timezone.utc)
        self._mutex = threading.Lock()

    def now(self) -> datetime:
        with self._mutex:
            return self._now

    def advance(self, seconds: float) -> None:
        with self._mutex:
            self._now += timedelta(seconds=seconds)

    def wait(self, seconds: float, cancel: threading.Event | None = None) -> bool:
        if cancel is not None:
            return cancel.wait(0.001)
        self.advance(seconds)
        return False


@pytest.fixture(autouse=True)
def reset_fslock_logger() -> Generator[None, None, None]:
    """Undo CLI logging configuration so caplog sees fslock records."""
    yield
    logger = logging.getLogger("fslock")
    logger.handlers = []
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def runner() -> CliRunner:
    """Create CLI test runner."""
    return CliRunner()


@pytest.fixture
def fast_clock() -> FastClock:
    return FastClock()


@pytest.fixture
def manual_clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def lock_dir(tmp_path: Path) -> Path:
    """Shared parent directory that does not exist yet."""
    return tmp_path / "locks"


@pytest.fixture
def make_lock(
    lock_dir: Path, fast_clock: FastClock
) -> Generator[Callable[..., Lock], None, None]:
    """Factory for lock handles on the same lock; breaks leftovers on teardown."""
    created: list[Lock] = []

    def factory(
        name: str = "testing",
        config: LockConfig | None = None,
        clock: FastClock | ManualClock | None = None,
    ) -> Lock:
        lock = Lock(lock_dir, name, config=config, clock=clock or fast_clock)
        created.append(lock)
        return lock

    yield factory

    for lock in created:
        lock.break_lock()


def declare_dead(lock: Lock, pid: int = DEAD_PID) -> None:
    """Make a held lock look like its holder crashed.

    Stops the heartbeat and rewrites the held record to a foreign pid whose
    liveness marker does not exist.
    """
    lock._stop_heartbeat()
    record = HeldRecord.from_toml(lock.held_file.read_text())
    lock.held_file.write_text(record.model_copy(update={"pid": pid}).to_toml())


def wait_for(predicate: Callable[[], bool], timeout: float = 10.0) -> bool:
    """Poll predicate until it is true or timeout seconds pass."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.005)
    return predicate()
