"""fslock: cross-process mutual exclusion backed by a shared directory."""

from .config import FSLockConfig, LockConfig, load_config
from .core import Lock, LockState
from .errors import FSLockError, InvalidLockNameError, LockNotHeldError, LockTimeoutError
from .models import HeldRecord

__version__ = "0.1.0"

__all__ = [
    "FSLockConfig",
    "FSLockError",
    "HeldRecord",
    "InvalidLockNameError",
    "Lock",
    "LockConfig",
    "LockNotHeldError",
    "LockState",
    "LockTimeoutError",
    "__version__",
    "load_config",
]
