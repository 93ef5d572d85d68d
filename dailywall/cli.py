"""
dailywall

Keep a local collection of the daily wallpapers published on a photo-listing site, catch up on
any days that were missed, and set the newest one as the desktop background.

This module defines the entry point to the dailywall CLI. It defines a 'dailywall' command group
that loads the configuration, sets up logging and console verbosity, and hands the configuration
to the subcommands found in the subcommands directory through the click context.

dailywall is meant to be run by a scheduler (cron, a systemd timer, ...) as often as you like:

    */30 * * * * dailywall --quiet sync
"""

import click

from dailywall import config as dailywall_config

from dailywall.cli_utils.console import console
from dailywall.cli_utils.console import setup_logging
from dailywall.cli_utils.console import silence
from dailywall.cli_utils.decorators import catch_errors
from dailywall.cli_utils.utils import attach_commands
from dailywall.cli_utils.utils import import_commands


@click.group()
@click.option(
    "--verbose",
    "verbosity",
    flag_value="verbose",
    default=True,
    help="Print all output to stdout or the terminal.",
)
@click.option(
    "--quiet",
    "verbosity",
    flag_value="quiet",
    help="Silence everything but warnings and errors.",
)
@click.option(
    "--debug",
    "verbosity",
    flag_value="debug",
    help="Also print debugging information.",
)
@click.version_option(package_name="dailywall")
@click.pass_context
@catch_errors
def cli(ctx: click.Context, verbosity):
    """
    dailywall

    Download the daily wallpapers of a photo-listing site, keep a ledger of every day
    downloaded, and set the newest one as your desktop background.


    ====================
    Usage:
    ====================

        catch up on every wallpaper published since the last run:

            $ dailywall sync

        list the wallpapers downloaded so far:

            $ dailywall history --limit 10

        write the default configuration to ~/.config/dailywall/config.json:

            $ dailywall config

    The configuration directory can be changed with the DAILYWALL_CONFIG_DIR environment
    variable (also read from a .env file).
    """

    if verbosity == "quiet":
        silence()
    else:
        console.file = None

    config = dailywall_config.init()
    setup_logging(verbosity, config.log_file)

    ctx.obj = config


def main():

    commands = import_commands()
    attach_commands(cli, commands)
    cli()


if __name__ == "__main__":
    main()
