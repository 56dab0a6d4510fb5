"""CLI command implementations for fslock.

This package contains the implementation of each CLI command,
separated from the CLI framework setup in cli.py.
"""

from .break_lock import break_lock
from .init import init_config
from .run import run
from .status import status

__all__ = [
    "break_lock",
    "init_config",
    "run",
    "status",
]
