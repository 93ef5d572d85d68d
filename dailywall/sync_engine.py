"""
Sync Engine

Brings the ledger up to date with the listing page in a single pass:

1) baseline: the date of the newest ledger record, or yesterday when the ledger is empty.
   If the ledger already has today's wallpaper nothing else is done (not even a request),
   so the scheduler can run dailywall as often as it likes.
2) discover: read the listing page, newest-first.
3) catch-up window: take items while they are newer than the baseline, stopping at the first
   one that is not. Items dated after today are skipped (sites may list tomorrow's wallpaper
   before its image is available) without stopping the scan.
4) process the window oldest-first. Every item is resolved, downloaded and appended to the
   ledger; the newest one is also presented (background + notification) before it is appended.

Any error aborts the run. Records appended before the error stay in the ledger, and the next
run catches up from there.
"""

import logging
from dataclasses import dataclass
from dataclasses import field
from datetime import date, timedelta
from enum import Enum
from pathlib import Path
from typing import Optional

from dailywall.errors import ParseError
from dailywall.ledger import Ledger
from dailywall.ledger import WallpaperRecord
from dailywall.site_handler import DatedItem

logger = logging.getLogger(__name__)


class SyncStatus(Enum):
    UP_TO_DATE = "up to date"
    NOTHING_NEW = "nothing new"
    SYNCED = "synced"


@dataclass
class SyncReport:
    """What a run did. records are in the order they were appended (oldest first)."""

    status: SyncStatus
    today: date
    baseline: date
    records: list[WallpaperRecord] = field(default_factory=list)
    skipped_future: list[DatedItem] = field(default_factory=list)
    image_dir: Optional[Path] = None

    @property
    def head(self) -> Optional[WallpaperRecord]:
        """The record that was presented, if any."""

        return self.records[-1] if self.records else None


def local_today() -> date:
    """The current calendar day. Computed once per run and passed to synchronize()."""

    return date.today()


def baseline_date(last_date: Optional[date], today: date) -> date:
    """Date the catch-up starts after: the ledger's last date, or yesterday for an empty ledger."""

    if last_date is None:
        return today - timedelta(days=1)

    return last_date


def catch_up_window(
    candidates: list[DatedItem], baseline: date, today: date
) -> tuple[list[DatedItem], list[DatedItem]]:
    """
    Select the items to synchronize from a newest-first listing.

    Returns (window, skipped): window holds the items dated after baseline and not after
    today, oldest first; skipped holds the items dated after today that were passed over.
    """

    eligible = []
    skipped = []

    for candidate in candidates:
        if candidate.date <= baseline:
            break

        if candidate.date > today:
            skipped.append(candidate)
            continue

        eligible.append(candidate)

    eligible.reverse()
    return eligible, skipped


def synchronize(ledger: Ledger, site, sink, image_dir: Path, today: date) -> SyncReport:
    """
    Run one synchronization pass.

    site provides list_candidates(), resolve(detail_url) and download(item, dest_dir)
    (see site_handler.SiteClient); sink provides present(path, title, description)
    (see wallpaper_handler.PresentationSink).
    """

    image_dir = Path(image_dir)
    last_date = ledger.read_last_date()

    if last_date == today:
        logger.info("Ledger already has the wallpaper for %s", today.isoformat())
        return SyncReport(SyncStatus.UP_TO_DATE, today, today, image_dir=image_dir)

    if last_date is None:
        ledger.ensure_exists()

    baseline = baseline_date(last_date, today)
    logger.info("Catching up after %s", baseline.isoformat())

    candidates = site.list_candidates()
    window, skipped = catch_up_window(candidates, baseline, today)

    for item in skipped:
        logger.info("Skipping %s, it is dated after today", item.date.isoformat())

    if last_date is not None and candidates and candidates[-1].date > baseline:
        logger.warning(
            "Every wallpaper on the listing page is newer than %s; "
            "older missing days are not on the page and will not be downloaded",
            baseline.isoformat(),
        )

    report = SyncReport(
        SyncStatus.NOTHING_NEW,
        today,
        baseline,
        skipped_future=skipped,
        image_dir=image_dir,
    )

    if not window:
        logger.info("No new wallpapers")
        return report

    *backfill, head = window

    for item in backfill:
        report.records.append(_synchronize_item(ledger, site, image_dir, item))

    report.records.append(_synchronize_item(ledger, site, image_dir, head, sink=sink))
    report.status = SyncStatus.SYNCED

    return report


def _synchronize_item(
    ledger: Ledger, site, image_dir: Path, item: DatedItem, sink=None
) -> WallpaperRecord:
    """Resolve, download and record one wallpaper, presenting it first when a sink is given."""

    resolved = site.resolve(item.detail_url)

    if resolved.date != item.date:
        raise ParseError(
            f"{item.detail_url} is dated {resolved.date.isoformat()} "
            f"but listed as {item.date.isoformat()}"
        )

    record = WallpaperRecord(
        date=resolved.date, filename=resolved.filename, description=resolved.text
    )

    # nothing is downloaded or presented for a record the ledger would refuse
    try:
        record.to_line()
    except ValueError as error:
        raise ParseError(f"{item.detail_url}: {error}") from error

    path = site.download(resolved, image_dir)

    if sink is not None:
        sink.present(path, title=resolved.title, description=resolved.description)

    ledger.append(record)
    logger.info("Recorded %s %s", record.date.isoformat(), record.filename)

    return record
