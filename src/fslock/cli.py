"""fslock CLI: inspect and use cross-process filesystem locks."""

from pathlib import Path

import typer
from pydantic import ValidationError

from fslock import __version__

from .commands import break_lock, init_config, run, status
from .config import load_config
from .constants import CONFIG_FILENAME
from .logging import configure_logging
from .output import OutputContext, get_output_context, set_output_context


def _version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"fslock {__version__}")
        raise typer.Exit()


app = typer.Typer(
    name="fslock",
    help="Cross-process mutual exclusion using a shared directory",
    no_args_is_help=True,
)


@app.callback()
def main(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase verbosity (-v, -vv)",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Suppress non-error output",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output in JSON format for automation",
    ),
    no_color: bool = typer.Option(
        False,
        "--no-color",
        help="Disable colored output",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Debug logging with timestamps and source locations",
    ),
    config: Path = typer.Option(
        Path(CONFIG_FILENAME),
        "--config",
        "-c",
        help="Lock timing config (TOML); defaults apply if missing",
    ),
) -> None:
    """fslock - cross-process filesystem locks."""
    console = configure_logging(
        verbosity=verbose,
        quiet=quiet,
        no_color=no_color,
        debug=debug,
    )
    set_output_context(OutputContext(console=console, json_mode=json_output))

    try:
        ctx.obj = load_config(config)
    except (ValidationError, ValueError) as e:
        get_output_context().error(f"Invalid config {config}: {e}")
        raise typer.Exit(1) from None


app.command()(status)
app.command("break")(break_lock)
app.command("run")(run)
app.command("init-config")(init_config)


if __name__ == "__main__":
    app()
