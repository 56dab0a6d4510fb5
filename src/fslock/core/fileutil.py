"""Filesystem primitives the lock protocol relies on.

Correctness of the lock depends on replace_file: moving a directory onto a
path already occupied by a non-empty directory must fail rather than merge
or overwrite. Filesystems without that guarantee are unsupported.
"""

import errno
import os
import sys
from datetime import datetime
from pathlib import Path

_OCCUPIED_ERRNOS = (errno.EEXIST, errno.ENOTEMPTY)


def _is_occupied(exc: OSError, destination: Path) -> bool:
    """Check whether a rename failed because the destination is taken."""
    if exc.errno in _OCCUPIED_ERRNOS:
        return True
    # MoveFileEx reports a directory destination as access denied
    return sys.platform == "win32" and isinstance(exc, PermissionError) and destination.exists()


def replace_file(source: Path, destination: Path) -> None:
    """Atomically move source onto destination.

    On POSIX this is rename(2). On Windows it is MoveFileEx with replace
    semantics (os.replace). Both replace an existing file but refuse an
    occupied directory.

    Raises:
        FileExistsError: If destination is an existing non-empty directory
        OSError: Any other rename failure, unchanged
    """
    try:
        if sys.platform == "win32":
            os.replace(source, destination)
        else:
            os.rename(source, destination)
    except FileExistsError:
        raise
    except OSError as e:
        if _is_occupied(e, destination):
            raise FileExistsError(
                errno.EEXIST, "Destination already exists", str(destination)
            ) from e
        raise


def refresh_marker(marker: Path, when: datetime) -> None:
    """Set a marker file's access and modification times without touching content."""
    ts = when.timestamp()
    os.utime(marker, (ts, ts))
