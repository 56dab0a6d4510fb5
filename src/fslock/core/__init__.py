"""Core locking logic for fslock.

- fileutil: Atomic rename and liveness marker primitives
- retry: Bounded fixed-delay retry helper
- heartbeat: Background liveness marker refresher
- lock: The Lock handle (acquire, reclaim, release)
"""

from .fileutil import refresh_marker, replace_file
from .heartbeat import Heartbeat
from .lock import Lock, LockState
from .retry import Attempt, RetryStrategy

__all__ = [
    "Attempt",
    "Heartbeat",
    "Lock",
    "LockState",
    "RetryStrategy",
    "refresh_marker",
    "replace_file",
]
