"""Pydantic data models persisted by fslock.

- HeldRecord: the owner record stored in a lock directory's ``held`` file
"""

from .record import HeldRecord, RecordDecodeError

__all__ = [
    "HeldRecord",
    "RecordDecodeError",
]
