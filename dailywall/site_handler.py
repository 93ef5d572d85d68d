"""
Wallpaper Site Handler

Reads the photo-listing website dailywall synchronizes from. Two pages are involved:

- the listing page, which shows the most recent wallpapers newest-first, each item with a
  visible date and a link to a detail page (list_candidates)
- the detail page of one wallpaper, which carries its date, description, optional title and
  the image element whose source attribute points at the full size image (resolve)

Which elements to read and how dates are written on the page are taken from a SiteProfile
(see config.py), so a change in the site's markup is a configuration change. Only a single
listing page is read: if more days were missed than the page shows, the older ones are
never backfilled.

All requests go through one requests.Session with an explicit timeout. Any transport error
or non-success status becomes a FetchError, any missing element or unreadable date a ParseError.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from typing import Optional
from urllib.parse import urljoin, urlparse

import requests
from bs4 import BeautifulSoup

from dailywall.config import SiteProfile
from dailywall.errors import FetchError
from dailywall.errors import ParseError
from dailywall.image_handler import download_image

logger = logging.getLogger(__name__)

USER_AGENT = "dailywall"


@dataclass(frozen=True)
class DatedItem:
    """A wallpaper found on the listing page: its date and the url of its detail page."""

    date: date
    detail_url: str


@dataclass(frozen=True)
class ResolvedItem:
    """Everything read from a wallpaper's detail page."""

    date: date
    image_url: str
    title: str
    description: str

    @property
    def filename(self) -> str:
        return filename_from_url(self.image_url)

    @property
    def text(self) -> str:
        """Description with the title, when there is one, joined ahead of it."""

        if self.title:
            return f"{self.title}.  {self.description}"

        return self.description


def filename_from_url(url: str) -> str:
    """
    The local filename for an image: everything after the last '/' of the url's path.
    Query strings and fragments are not part of the name.
    """

    path = urlparse(url).path
    return path[path.rfind("/") + 1 :]


def parse_site_date(text: str, formats: list[str]) -> date:
    """
    Parse a date as written on the site, trying each strptime format in turn.
    Raise ParseError if none of them matches.
    """

    text = " ".join(text.split())

    for fmt in formats:
        try:
            return datetime.strptime(text, fmt).date()

        except ValueError:
            continue

    raise ParseError(f"Could not parse date {text!r} (expected one of {formats})")


class SiteClient:
    """
    Remote catalog reader and detail resolver for one site. Pass a session to reuse
    connections (or to substitute one in tests); otherwise a new one is created.
    """

    def __init__(
        self,
        profile: SiteProfile = None,
        session: requests.Session = None,
        timeout: Optional[float] = 30.0,
    ):
        self.profile = profile or SiteProfile()
        self.session = session or requests.Session()
        self.session.headers.setdefault("User-Agent", USER_AGENT)
        self.timeout = timeout

    def close(self):
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def absolute_url(self, reference: str) -> str:
        """Resolve a (possibly root-relative) reference against the site's base url."""

        return urljoin(self.profile.base_url.rstrip("/") + "/", reference)

    def fetch_page(self, url: str) -> BeautifulSoup:
        """GET url and parse the response body as HTML."""

        logger.debug("GET %s", url)

        try:
            response = self.session.get(url, timeout=self.timeout)

        except requests.exceptions.RequestException as error:
            raise FetchError(f"{url}: {error}") from error

        try:
            response.raise_for_status()
            html = response.text

        except requests.exceptions.HTTPError as error:
            raise FetchError(
                f"{url}: status code error: {response.status_code} {response.reason}"
            ) from error

        except requests.exceptions.RequestException as error:
            raise FetchError(f"{url}: {error}") from error

        finally:
            response.close()

        return BeautifulSoup(html, "html.parser")

    def list_candidates(self) -> list[DatedItem]:
        """
        Read the listing page and return its items newest-first, in page order.
        """

        profile = self.profile
        url = profile.listing_url
        page = self.fetch_page(url)

        items = page.select(profile.listing_item_selector)
        if not items:
            raise ParseError(
                f"Could not find any '{profile.listing_item_selector}' items on {url}"
            )

        candidates = []

        for item in items:
            date_element = item.select_one(profile.listing_date_selector)
            if date_element is None:
                raise ParseError(
                    f"Listing item on {url} has no '{profile.listing_date_selector}' element"
                )

            item_date = parse_site_date(date_element.get_text(), profile.date_formats)

            link = item.select_one(profile.listing_link_selector)
            href = link.get("href") if link is not None else None
            if not href:
                raise ParseError(
                    f"Could not find url at date {item_date:%Y%m%d} on {url}"
                )

            candidates.append(DatedItem(date=item_date, detail_url=self.absolute_url(href)))

        logger.info("Found %d wallpapers on %s", len(candidates), url)
        return candidates

    def resolve(self, detail_url: str) -> ResolvedItem:
        """
        Read a wallpaper's detail page: its date, title (if the profile has a title selector),
        description and the absolute url of the full size image.
        """

        profile = self.profile
        page = self.fetch_page(detail_url)

        scope = page
        if profile.detail_scope_selector:
            scope = page.select_one(profile.detail_scope_selector)
            if scope is None:
                raise ParseError(
                    f"Could not find '{profile.detail_scope_selector}' on {detail_url}"
                )

        date_element = scope.select_one(profile.detail_date_selector)
        if date_element is None:
            raise ParseError(f"Could not find the date on {detail_url}")
        item_date = parse_site_date(date_element.get_text(), profile.date_formats)

        description_element = scope.select_one(profile.detail_description_selector)
        if description_element is None:
            raise ParseError(f"Could not find the description on {detail_url}")
        description = description_element.get_text().strip()

        title = ""
        if profile.detail_title_selector:
            title_element = scope.select_one(profile.detail_title_selector)
            if title_element is None:
                raise ParseError(f"Could not find the title on {detail_url}")
            title = title_element.get_text().strip()

        image = page.select_one(profile.detail_image_selector)
        src = image.get(profile.detail_image_attribute) if image is not None else None
        if not src:
            raise ParseError(f"Could not find img src on url {detail_url}")

        resolved = ResolvedItem(
            date=item_date,
            image_url=self.absolute_url(src),
            title=title,
            description=description,
        )

        if not resolved.filename:
            raise ParseError(
                f"Image url {resolved.image_url} on {detail_url} has no filename"
            )

        # the filename is a single field of a ledger line
        if any(char.isspace() for char in resolved.filename):
            raise ParseError(
                f"Image filename {resolved.filename!r} on {detail_url} contains whitespace"
            )

        return resolved

    def download(self, item: ResolvedItem, dest_dir: Path) -> Path:
        """Download a resolved wallpaper's image into dest_dir under its remote filename."""

        return download_image(
            item.image_url,
            dest_dir,
            item.filename,
            session=self.session,
            timeout=self.timeout,
        )
