"""
dailywall CLI Utilities

Discovery of the subcommands shipped in dailywall/subcommands and construction of the
objects a synchronization run needs from the loaded configuration.
"""

import importlib
import pkgutil
from pathlib import Path

import click

from dailywall.config import DailywallConfig
from dailywall.ledger import Ledger
from dailywall.site_handler import SiteClient
from dailywall.wallpaper_handler import PresentationSink
from dailywall.cli_utils.console import warn

SUBCOMMANDS_PACKAGE = "dailywall.subcommands"
SUBCOMMANDS_DIR = Path(__file__).parent.parent / "subcommands"


def import_commands(
    package: str = SUBCOMMANDS_PACKAGE, directory: Path = SUBCOMMANDS_DIR
) -> list[click.Command]:
    """
    Retrieve the click Commands defined in the modules of the subcommands directory.

    A valid dailywall command module defines a "cli" function that is wrapped as a click
    Command object. Set the 'name' keyword argument in the @click.command decorator to set
    the name of the command intended for the end user.
    """

    commands = []

    for module_info in sorted(pkgutil.iter_modules([str(directory)]), key=lambda m: m.name):
        module = importlib.import_module(f"{package}.{module_info.name}")

        cli = getattr(module, "cli", None)
        if isinstance(cli, click.Command):
            commands.append(cli)

        else:
            warn(f"Cannot add command {module_info.name}: no 'cli' command found.")

    return commands


def attach_commands(group: click.Group, commands: list[click.Command]):
    """
    Attach each command in a list of click Command objects to a provided group. Useful when
    retrieving a dynamic list of subcommands with import_commands().
    """

    for command in commands:
        group.add_command(command)


def make_ledger(config: DailywallConfig) -> Ledger:
    return Ledger(config.DAILYWALL_LEDGER_FILE)


def make_site_client(config: DailywallConfig) -> SiteClient:
    return SiteClient(profile=config.site, timeout=config.request_timeout)


def make_sink(config: DailywallConfig) -> PresentationSink:
    return PresentationSink(
        background_command=list(config.background_command),
        notify_command=list(config.notify_command),
    )
