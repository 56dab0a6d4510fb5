"""Status command for inspecting a lock."""

from pathlib import Path

import typer

from ..output import get_output_context
from .common import open_lock


def status(
    ctx: typer.Context,
    parent_dir: Path = typer.Argument(..., help="Shared lock directory"),
    name: str = typer.Argument(..., help="Lock name"),
) -> None:
    """Show who holds a lock and whether the holder is alive."""
    out = get_output_context()
    lock = open_lock(ctx, parent_dir, name)

    record = lock.held_record()
    if record is None:
        locked = lock.is_locked()
        out.result(
            {"name": name, "locked": locked},
            f"[yellow]{name}: locked, unreadable record[/yellow]"
            if locked
            else f"[green]{name}: unlocked[/green]",
        )
        return

    alive = lock.is_alive(record.pid)
    out.result(
        {
            "name": name,
            "locked": True,
            "pid": record.pid,
            "message": record.message,
            "alive": alive,
        },
        f"[bold]{name}:[/bold] locked by pid {record.pid}"
        + (" [green](alive)[/green]" if alive else " [red](stale)[/red]"),
    )
    if record.message:
        out.print(f"  Message: {record.message}")
