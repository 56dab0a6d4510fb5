"""Logging configuration for the fslock CLI.

The library itself only emits records through ``logging.getLogger(__name__)``;
handlers are installed here, for command line use.
"""

import logging
from enum import IntEnum
from typing import TextIO

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "fslock"


class LogLevel(IntEnum):
    """Log level enumeration."""

    QUIET = logging.WARNING
    NORMAL = logging.INFO
    VERBOSE = logging.DEBUG


def configure_logging(
    verbosity: int = 0,
    quiet: bool = False,
    no_color: bool = False,
    stream: TextIO | None = None,
    debug: bool = False,
) -> Console:
    """Configure the fslock logger based on CLI options.

    Args:
        verbosity: Number of -v flags (0=normal, 1+=debug)
        quiet: Suppress non-error output (takes precedence over debug/verbosity)
        no_color: Disable colored output
        stream: Output stream for logs (defaults to stderr)
        debug: Enable debug logging with timestamps and source locations

    Returns:
        Configured Rich console for output

    Note:
        Flag precedence: quiet > debug > verbosity
    """
    if quiet:
        level = LogLevel.QUIET
    elif debug or verbosity >= 1:
        level = LogLevel.VERBOSE
    else:
        level = LogLevel.NORMAL

    console = Console(
        file=stream,
        stderr=True,
        force_terminal=not no_color,
        no_color=no_color,
    )

    handler = RichHandler(
        console=console,
        show_time=debug or verbosity >= 2,
        show_path=debug or verbosity >= 2,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    logger.handlers = [handler]
    logger.propagate = False

    return console
