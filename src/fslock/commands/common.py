"""Helpers shared by CLI commands."""

from pathlib import Path

import typer

from ..config import FSLockConfig
from ..core import Lock
from ..errors import InvalidLockNameError
from ..output import get_output_context

EXIT_ERROR = 1
EXIT_TIMEOUT = 2
EXIT_INVALID_NAME = 3


def open_lock(ctx: typer.Context, parent_dir: Path, name: str) -> Lock:
    """Build a lock handle from CLI arguments, exiting on bad input."""
    out = get_output_context()
    config = ctx.obj if isinstance(ctx.obj, FSLockConfig) else FSLockConfig()
    try:
        return Lock(parent_dir, name, config=config.lock)
    except InvalidLockNameError as e:
        out.error(str(e))
        raise typer.Exit(EXIT_INVALID_NAME) from None
    except OSError as e:
        out.error(f"Cannot use lock directory {parent_dir}: {e}")
        raise typer.Exit(EXIT_ERROR) from None
