"""Run command: execute a program while holding a lock."""

import logging
import shlex
import subprocess
from pathlib import Path

import typer

from ..errors import LockNotHeldError, LockTimeoutError
from ..output import get_output_context
from .common import EXIT_ERROR, EXIT_TIMEOUT, open_lock

logger = logging.getLogger(__name__)

EXIT_COMMAND_NOT_FOUND = 127


def run(
    ctx: typer.Context,
    parent_dir: Path = typer.Argument(..., help="Shared lock directory"),
    name: str = typer.Argument(..., help="Lock name"),
    command: list[str] = typer.Argument(..., help="Command to run (after --)"),
    timeout: float | None = typer.Option(
        None,
        "--timeout",
        "-t",
        min=0,
        help="Give up after this many seconds (default: wait forever)",
    ),
    message: str | None = typer.Option(
        None,
        "--message",
        "-m",
        help="Message stored with the lock (defaults to the command line)",
    ),
) -> None:
    """Run a command while holding a lock, exiting with its status."""
    out = get_output_context()
    lock = open_lock(ctx, parent_dir, name)
    lock_message = message if message is not None else shlex.join(command)

    try:
        if timeout is None:
            lock.lock(lock_message)
        else:
            lock.lock_with_timeout(timeout, lock_message)
    except LockTimeoutError as e:
        out.error(str(e), {"name": name, "held_by": lock.message()})
        raise typer.Exit(EXIT_TIMEOUT) from None
    except OSError as e:
        out.error(f"Failed to acquire lock: {e}")
        raise typer.Exit(EXIT_ERROR) from None

    logger.debug("Running %s under lock %r", lock_message, name)
    try:
        returncode = subprocess.run(command, check=False).returncode
    except FileNotFoundError:
        out.error(f"Command not found: {command[0]}")
        returncode = EXIT_COMMAND_NOT_FOUND
    finally:
        try:
            lock.unlock()
        except LockNotHeldError:
            logger.warning("Lock %r was broken while the command ran", name)

    raise typer.Exit(returncode)
