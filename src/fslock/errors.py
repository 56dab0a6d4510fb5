"""Exceptions raised by fslock."""


class FSLockError(Exception):
    """Base exception for filesystem lock errors."""


class InvalidLockNameError(FSLockError, ValueError):
    """Raised when a lock name does not match NAME_PATTERN."""


class LockTimeoutError(FSLockError, TimeoutError):
    """Raised when a lock could not be acquired before the deadline."""


class LockNotHeldError(FSLockError):
    """Raised when releasing a lock this handle does not hold."""
