"""
Config Command
"""

import click

from dailywall.config import DailywallConfig
from dailywall.cli_utils.console import confirm_success
from dailywall.cli_utils.decorators import catch_errors


@click.command(name="config")
@click.option(
    "--force",
    is_flag=True,
    default=False,
    help="Replace an existing config file.",
)
@click.pass_obj
@catch_errors
def cli(config: DailywallConfig, force: bool):
    """
    Write the current configuration (the defaults, on a fresh install) to config.json so it can be edited.
    """

    dest_file = config.generate_config_json(overwrite=force)
    confirm_success(f":white_check_mark-emoji: 'config' saved configuration to {dest_file}")
