"""Break command for forcibly removing a lock."""

from pathlib import Path

import typer

from ..output import get_output_context
from .common import EXIT_ERROR, open_lock


def break_lock(
    ctx: typer.Context,
    parent_dir: Path = typer.Argument(..., help="Shared lock directory"),
    name: str = typer.Argument(..., help="Lock name"),
) -> None:
    """Forcibly break a lock regardless of who holds it."""
    out = get_output_context()
    lock = open_lock(ctx, parent_dir, name)

    was_locked = lock.is_locked()
    try:
        lock.break_lock()
    except OSError as e:
        out.error(f"Failed to break lock: {e}")
        raise typer.Exit(EXIT_ERROR) from None

    if was_locked:
        out.success(f"Broke lock {name}", {"name": name, "broken": True})
    else:
        out.success(f"Lock {name} was not held", {"name": name, "broken": False})
