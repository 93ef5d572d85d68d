"""
dailywall console utilities

This module provides application-wide access to Rich Console objects for
writing to stdout and stderr, and configures the logging module so that
diagnostics from every dailywall module end up on the error console and,
optionally, in a log file that survives scheduled (unattended) runs.
"""

import logging
from io import StringIO
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

dailywall_theme = Theme(
    {"warning": "orange_red1", "fail": "bold red", "confirm": "", "describe": ""}
)

console = Console(theme=dailywall_theme)
error_console = Console(theme=dailywall_theme, stderr=True)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

LOG_LEVELS = {
    "quiet": logging.WARNING,
    "verbose": logging.INFO,
    "debug": logging.DEBUG,
}


"""
Formatting helpers
"""


def warn(msg: str):
    """
    Format msg and print to stderr.
    """

    error_console.print(
        f":exclamation_mark-emoji: [bold]warning: [/] {msg}", style="warning"
    )


def describe(msg: str, **kwargs):
    """
    Format descriptive msg and print to stdout.
    """

    console.print(f"{msg}", style="describe", **kwargs)


def confirm_success(msg: str, **kwargs):
    """
    Format confirmation msg and print to stdout. Accept any additional kwargs that console.print from
    rich module exposes.
    """

    console.print(f"{msg}", style="confirm", **kwargs)


def fail(msg: str):
    """
    Format failure msg and print to stderr.
    """

    error_console.print(f":x-emoji: failed. {msg}", style="fail")


def silence():
    """Send everything printed to stdout to a junk stream (--quiet). Errors still reach stderr."""

    console.file = StringIO()


def setup_logging(verbosity: str = "verbose", log_file: Optional[Path] = None):
    """
    Configure the 'dailywall' logger. Records are rendered on the error console by a
    RichHandler and, when log_file is given, appended to that file in plain text.
    Calling this again replaces the handlers installed by a previous call.
    """

    logger = logging.getLogger("dailywall")
    logger.setLevel(LOG_LEVELS.get(verbosity, logging.INFO))

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    logger.addHandler(
        RichHandler(console=error_console, show_path=False, rich_tracebacks=True)
    )

    if log_file is not None:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(file_handler)

    return logger
