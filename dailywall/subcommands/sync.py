"""
Sync Command
"""

from datetime import datetime

import click

from dailywall.sync_engine import SyncStatus
from dailywall.sync_engine import local_today
from dailywall.sync_engine import synchronize

from dailywall.cli_utils.console import confirm_success
from dailywall.cli_utils.console import describe
from dailywall.cli_utils.console import warn
from dailywall.cli_utils.decorators import catch_errors
from dailywall.cli_utils.utils import make_ledger
from dailywall.cli_utils.utils import make_site_client
from dailywall.cli_utils.utils import make_sink


@click.command(name="sync")
@click.option(
    "--today",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    default=None,
    help="Pretend today is this day (YYYY-MM-DD). Defaults to the current local date.",
)
@click.pass_obj
@catch_errors
def cli(config, today: datetime):
    """
    Download every wallpaper published since the last run and set the newest one as the desktop background.
    """

    today = today.date() if today is not None else local_today()

    with make_site_client(config) as site:
        report = synchronize(
            ledger=make_ledger(config),
            site=site,
            sink=make_sink(config),
            image_dir=config.DAILYWALL_IMAGE_DIR,
            today=today,
        )

    if report.status is SyncStatus.UP_TO_DATE:
        describe(f":calendar-emoji: already have the wallpaper for {today:%Y-%m-%d}")
        return

    for item in report.skipped_future:
        warn(f"skipped {item.date:%Y-%m-%d}, it is not published yet")

    if report.status is SyncStatus.NOTHING_NEW:
        describe(f":calendar-emoji: no new wallpapers since {report.baseline:%Y-%m-%d}")
        return

    for record in report.records:
        describe(
            f":floppy_disk-emoji: saved '{record.filename}' ({record.date:%Y-%m-%d}) to {report.image_dir}"
        )

    confirm_success(
        f":white_check_mark-emoji: 'sync' updated wallpaper to {report.image_dir / report.head.filename}"
    )
