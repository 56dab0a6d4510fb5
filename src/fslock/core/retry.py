"""Bounded retry with a fixed delay between attempts.

Usage:
    attempt = RetryStrategy(attempts=10, delay=0.01).start(clock)
    while attempt.next():
        if try_something():
            break
"""

from dataclasses import dataclass

from ..clock import WALL_CLOCK, Clock


@dataclass(frozen=True)
class RetryStrategy:
    """How many times to try an operation and how long to wait between tries."""

    attempts: int
    delay: float = 0.0

    def __post_init__(self) -> None:
        if self.attempts < 1:
            raise ValueError(f"attempts must be at least 1, got {self.attempts}")
        if self.delay < 0:
            raise ValueError(f"delay must not be negative, got {self.delay}")

    def start(self, clock: Clock = WALL_CLOCK) -> "Attempt":
        """Begin a new sequence of attempts."""
        return Attempt(self, clock)


class Attempt:
    """A running sequence of attempts for a RetryStrategy."""

    def __init__(self, strategy: RetryStrategy, clock: Clock = WALL_CLOCK) -> None:
        self.strategy = strategy
        self.count = 0
        self._clock = clock

    def next(self) -> bool:
        """Wait until the next attempt is due, or return False when exhausted.

        The first call always returns True without waiting.
        """
        if not self.has_next():
            return False
        if self.count > 0:
            self._clock.wait(self.strategy.delay)
        self.count += 1
        return True

    def has_next(self) -> bool:
        """Return whether another attempt remains."""
        return self.count < self.strategy.attempts
