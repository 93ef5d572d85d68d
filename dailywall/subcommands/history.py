"""
History Command
"""

from itertools import islice

import click
from rich.table import Table
from rich.text import Text

from dailywall.cli_utils.console import console
from dailywall.cli_utils.console import describe
from dailywall.cli_utils.decorators import catch_errors
from dailywall.cli_utils.utils import make_ledger


@click.command(name="history")
@click.option(
    "--limit",
    "-n",
    type=click.IntRange(min=1),
    default=None,
    help="Show only the N most recent wallpapers.",
)
@click.pass_obj
@catch_errors
def cli(config, limit):
    """Show the wallpapers recorded in the ledger, newest first."""

    ledger = make_ledger(config)
    records = list(islice(ledger.records(), limit))

    if not records:
        describe(f"no wallpapers recorded in {ledger.path} yet")
        return

    table = Table(title=str(ledger.path))
    table.add_column("Date", no_wrap=True)
    table.add_column("File", no_wrap=True)
    table.add_column("Description")

    for record in records:
        table.add_row(
            f"{record.date:%Y-%m-%d}", Text(record.filename), Text(record.description)
        )

    console.print(table)
