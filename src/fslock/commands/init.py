"""Init command for writing a config template."""

from pathlib import Path

import typer

from ..config import write_config_template
from ..constants import CONFIG_FILENAME
from ..output import get_output_context


def init_config(
    path: Path = typer.Argument(Path(CONFIG_FILENAME), help="Config file to create"),
) -> None:
    """Write a config template with the default lock timings."""
    out = get_output_context()
    if path.exists():
        out.print(f"[yellow]Config already exists:[/yellow] {path}")
        out.print_json({"path": str(path), "created": False})
        return
    write_config_template(path)
    out.success(f"Created config template: {path}", {"path": str(path), "created": True})
