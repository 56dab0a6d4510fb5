"""On-disk mutex protecting a named resource.

A lock is a directory ``<parent>/<name>`` holding a ``held`` record. Taking
the lock means renaming a fully written temporary directory onto that path.
Exactly one contender's rename can succeed, so the rename is the only
ordering authority between processes.

While held, a heartbeat keeps ``alive.<pid>`` fresh inside the lock
directory. Before contending, a handle breaks the lock if the recorded
holder's marker is missing or older than the lividity timeout. A holder
that is merely suspended for longer than that timeout is treated as dead
and loses the lock.
"""

import logging
import os
import re
import shutil
import tempfile
import uuid
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from enum import Enum
from pathlib import Path
from types import TracebackType

from ..clock import WALL_CLOCK, Clock
from ..config import LockConfig
from ..constants import ALIVE_PREFIX, EVICT_RETRIES, HELD_FILENAME, NAME_PATTERN
from ..errors import InvalidLockNameError, LockNotHeldError, LockTimeoutError
from ..models import HeldRecord, RecordDecodeError
from .fileutil import replace_file
from .heartbeat import Heartbeat
from .retry import RetryStrategy

logger = logging.getLogger(__name__)

_VALID_NAME = re.compile(NAME_PATTERN)
_EVICT_RETRY = RetryStrategy(attempts=EVICT_RETRIES)


class LockState(str, Enum):
    """Lifecycle of a lock handle."""

    UNLOCKED = "unlocked"
    ACQUIRING = "acquiring"
    HELD = "held"
    STOPPING = "stopping"


def _keep_waiting() -> None:
    """Continue function for lock(): never gives up."""


class Lock:
    """Cross-process lock named ``name`` inside ``parent_dir``.

    Each handle has its own nonce, so two handles in the same process
    exclude each other just like handles in different processes. A handle
    should be driven from one thread at a time.

    Example:
        >>> lock = Lock("/var/lib/app/locks", "machine-lock")
        >>> with lock:
        ...     do_work()
    """

    def __init__(
        self,
        parent_dir: Path | str,
        name: str,
        config: LockConfig | None = None,
        clock: Clock | None = None,
    ) -> None:
        """Create a lock handle without acquiring it.

        Raises:
            InvalidLockNameError: If name does not match NAME_PATTERN
            OSError: If parent_dir cannot be created
        """
        if not _VALID_NAME.fullmatch(name):
            raise InvalidLockNameError(
                f"Invalid lock name {name!r}. Names must match {NAME_PATTERN!r}"
            )
        self.name = name
        self.parent_dir = Path(parent_dir)
        self.config = config or LockConfig()
        self.nonce = uuid.uuid4().hex
        self.pid = os.getpid()
        self._clock = clock or WALL_CLOCK
        self._heartbeat: Heartbeat | None = None
        self._state = LockState.UNLOCKED
        self.parent_dir.mkdir(parents=True, exist_ok=True)

    def __repr__(self) -> str:
        return f"Lock({str(self.lock_dir)!r}, state={self._state.value})"

    def __enter__(self) -> "Lock":
        self.lock()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.unlock()

    @property
    def state(self) -> LockState:
        return self._state

    @property
    def lock_dir(self) -> Path:
        return self.parent_dir / self.name

    @property
    def held_file(self) -> Path:
        return self.lock_dir / HELD_FILENAME

    def alive_file(self, pid: int) -> Path:
        """Path of the liveness marker for a holder process."""
        return self.lock_dir / f"{ALIVE_PREFIX}{pid}"

    # ------------------------------------------------------------------
    # Acquisition
    # ------------------------------------------------------------------

    def lock(self, message: str = "") -> None:
        """Block until the lock is acquired.

        The message is stored with the lock and can be read by any other
        handle for the same lock through message().
        """
        self._lock_loop(message, _keep_waiting)

    def lock_with_timeout(self, timeout: float, message: str = "") -> None:
        """Acquire the lock, giving up after timeout seconds.

        Raises:
            LockTimeoutError: If the lock was not acquired in time
        """
        deadline = self._clock.now() + timedelta(seconds=timeout)

        def check_deadline() -> None:
            if self._clock.now() > deadline:
                raise LockTimeoutError(f"Lock {self.name!r} timeout exceeded ({timeout}s)")

        self._lock_loop(message, check_deadline)

    def lock_with_func(self, message: str, continue_func: Callable[[], None]) -> None:
        """Acquire the lock, consulting continue_func after each failed attempt.

        continue_func stops the wait by raising; the exception propagates
        unchanged to the caller.
        """
        self._lock_loop(message, continue_func)

    def _lock_loop(self, message: str, continue_func: Callable[[], None]) -> None:
        if self._state is LockState.UNLOCKED:
            self._state = LockState.ACQUIRING
        held_message = ""
        try:
            self._reclaim_if_stale()
            while not self._try_acquire(message):
                continue_func()
                current = self.message()
                if current != held_message:
                    logger.info(
                        "Attempted lock failed %r, %s, currently held: %s",
                        self.name,
                        message,
                        current,
                    )
                    held_message = current
                self._clock.wait(self.config.wait_delay)
        except BaseException:
            if self._state is LockState.ACQUIRING:
                self._state = LockState.UNLOCKED
            raise

    def _try_acquire(self, message: str) -> bool:
        """Make one attempt at taking the lock.

        Returns:
            True if this handle now holds the lock, False if someone else does
        """
        # Fast path only; the rename below is what excludes other contenders
        if self.lock_dir.exists():
            return False
        # A "." prefix is never a valid lock name, and the same parent keeps
        # the rename on one filesystem
        temp_dir = Path(tempfile.mkdtemp(prefix=f".{self.nonce}", dir=self.parent_dir))
        try:
            record = HeldRecord(nonce=self.nonce, pid=self.pid, message=message)
            (temp_dir / HELD_FILENAME).write_text(record.to_toml(), encoding="utf-8")
            replace_file(temp_dir, self.lock_dir)
        except FileExistsError:
            # Beaten to it
            shutil.rmtree(temp_dir, ignore_errors=True)
            return False
        except BaseException:
            shutil.rmtree(temp_dir, ignore_errors=True)
            raise
        self._on_acquired()
        return True

    def _on_acquired(self) -> None:
        # A previous claim by this handle may have been broken underneath it
        self._stop_heartbeat()
        self._start_heartbeat()
        self._state = LockState.HELD
        logger.debug("Acquired lock %r in %s", self.name, self.parent_dir)

    def _start_heartbeat(self) -> None:
        heartbeat = Heartbeat(
            self.alive_file(self.pid), self.config.heartbeat_interval, self._clock
        )
        heartbeat.start()
        self._heartbeat = heartbeat

    # ------------------------------------------------------------------
    # Liveness and reclamation
    # ------------------------------------------------------------------

    def is_alive(self, pid: int) -> bool:
        """Check whether the holder process has refreshed its marker recently.

        A missing marker is looked up again a few times, since a new holder
        writes it just after its rename lands.
        """
        if pid == self.pid:
            return True
        marker = self.alive_file(pid)
        attempt = RetryStrategy(self.config.read_retries, self.config.read_retry_timeout).start(
            self._clock
        )
        while attempt.next():
            try:
                mtime = marker.stat().st_mtime
            except FileNotFoundError:
                continue
            age = self._clock.now() - datetime.fromtimestamp(mtime, tz=timezone.utc)
            return age < timedelta(seconds=self.config.lividity_timeout)
        return False

    def _reclaim_if_stale(self) -> None:
        """Break the lock if its holder is presumed dead."""
        try:
            record = self._read_record()
        except OSError:
            logger.debug("No lock to clean for %r", self.name)
            return
        except RecordDecodeError as e:
            logger.warning("Breaking lock %r with undecodable record: %s", self.name, e)
            self._evict()
            return

        if self.is_alive(record.pid):
            logger.debug("Lock %r is current (pid %d)", self.name, record.pid)
            return
        logger.info(
            "Breaking stale lock %r held by pid %d (%s)", self.name, record.pid, record.message
        )
        self._evict()

    # ------------------------------------------------------------------
    # Release
    # ------------------------------------------------------------------

    def unlock(self) -> None:
        """Release the lock held by this handle.

        Raises:
            LockNotHeldError: If this handle does not hold the lock
            OSError: If the lock directory could not be moved aside; the
                lock stays held and its heartbeat keeps running
        """
        if not self.is_lock_held():
            # The claim is gone; a heartbeat must not outlive it
            self._stop_heartbeat()
            self._state = LockState.UNLOCKED
            raise LockNotHeldError(f"Lock {self.name!r} is not held by this handle")

        self._state = LockState.STOPPING
        self._stop_heartbeat()
        try:
            evicted = self._evict()
        except OSError:
            if self.is_lock_held():
                self._start_heartbeat()
                self._state = LockState.HELD
            else:
                self._state = LockState.UNLOCKED
            raise
        self._state = LockState.UNLOCKED
        if not evicted:
            raise LockNotHeldError(f"Lock {self.name!r} was broken while unlocking")
        logger.debug("Released lock %r", self.name)

    def break_lock(self) -> None:
        """Forcibly remove the lock, whoever holds it. Missing locks are fine."""
        self._stop_heartbeat()
        self._state = LockState.UNLOCKED
        if self._evict():
            logger.debug("Broke lock %r", self.name)

    def _evict(self) -> bool:
        """Move the lock directory aside and delete it.

        Returns:
            False if there was no lock directory to evict
        """
        temp_dir = self.parent_dir / f".{self.name}.{uuid.uuid4().hex}"
        attempt = _EVICT_RETRY.start(self._clock)
        while attempt.next():
            try:
                replace_file(self.lock_dir, temp_dir)
            except FileNotFoundError:
                return False
            except OSError as e:
                if attempt.has_next():
                    logger.debug("Retrying eviction of %s: %s", self.lock_dir, e)
                    continue
                raise
            break
        shutil.rmtree(temp_dir)
        return True

    def _stop_heartbeat(self) -> None:
        if self._heartbeat is not None:
            self._heartbeat.stop()
            self._heartbeat = None

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------

    def _read_record(self) -> HeldRecord:
        try:
            content = self.held_file.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise RecordDecodeError(f"Invalid held record: {e}") from e
        return HeldRecord.from_toml(content)

    def held_record(self) -> HeldRecord | None:
        """Return the current holder's record, or None if unlocked or unreadable."""
        try:
            return self._read_record()
        except (OSError, RecordDecodeError):
            return None

    def is_lock_held(self) -> bool:
        """Whether the lock is currently held by this handle."""
        record = self.held_record()
        return record is not None and record.nonce == self.nonce

    def is_locked(self) -> bool:
        """Whether the lock is currently held by anyone."""
        return self.held_file.exists()

    def message(self) -> str:
        """Return the holder's message, or "" if there is no readable lock."""
        record = self.held_record()
        return record.message if record is not None else ""
