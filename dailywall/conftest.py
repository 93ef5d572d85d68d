"""
conftest.py

Test configuration for dailywall tests.

Defines Pytest fixtures for supplying test data to tests across the entire
test suite. Fixtures used within only a single module are defined
directly in that module. Conftest.py should only be used for universal
fixtures.

No test touches the network: requests are mocked with unittest.mock, and the
sync engine is driven with the in-memory FakeSite and FakeSink below.
"""

import io
import unittest.mock
from datetime import date
from pathlib import Path

import pytest
import requests
from PIL import Image

from dailywall.ledger import Ledger
from dailywall.site_handler import DatedItem
from dailywall.site_handler import ResolvedItem


@pytest.fixture(scope="session")
def image_bytes() -> bytes:
    """A small but valid JPEG image."""

    buffer = io.BytesIO()
    Image.new("RGB", (16, 9), color=(30, 90, 160)).save(buffer, format="JPEG")
    return buffer.getvalue()


@pytest.fixture
def make_response():
    """
    Factory for mocked requests.Response objects. A status code of 400 or more makes
    raise_for_status() raise an HTTPError, like the real thing.
    """

    def inner(status_code=200, text="", content=b"", reason="OK"):
        response = unittest.mock.create_autospec(requests.Response, instance=True)
        response.status_code = status_code
        response.reason = reason
        response.text = text
        response.iter_content.return_value = [content] if content else []

        if status_code >= 400:
            response.raise_for_status.side_effect = requests.HTTPError(
                f"{status_code} Error", response=response
            )

        return response

    return inner


@pytest.fixture
def listing_html():
    """Build a listing page in the markup of the default site profile from (date text, href) pairs."""

    def inner(items) -> str:
        articles = "\n".join(
            f"""
            <article class="thumb">
                <a href="{href}"><img src="/thumb{index}.jpg"></a>
                <time class="date">{date_text}</time>
            </article>
            """
            for index, (date_text, href) in enumerate(items)
        )
        return f"<html><body><main>{articles}</main></body></html>"

    return inner


@pytest.fixture
def detail_html():
    """Build a detail page in the markup of the default site profile."""

    def inner(date_text, description, src, title=None) -> str:
        title_html = f'<h1 class="title">{title}</h1>' if title is not None else ""
        return f"""
        <html><body>
            <img id="bing_wallpaper" src="{src}">
            <div class="detail">
                {title_html}
                <time itemprop="date">{date_text}</time>
                <div class="description">
                    {description}
                </div>
            </div>
        </body></html>
        """

    return inner


class FakeSite:
    """
    Stand-in for SiteClient. Built from a mapping of date -> (filename, description) with
    dates given newest-first as the listing page would show them.
    """

    def __init__(self, entries, image_bytes=b"image"):
        self.entries = dict(entries)
        self.image_bytes = image_bytes
        self.list_calls = 0
        self.resolved = []
        self.downloaded = []
        self.fail_on = {}

    @staticmethod
    def url_for(day: date) -> str:
        return f"https://example.com/detail/{day:%Y%m%d}"

    def list_candidates(self):
        self.list_calls += 1
        return [DatedItem(day, self.url_for(day)) for day in self.entries]

    def resolve(self, detail_url):
        self.resolved.append(detail_url)
        if detail_url in self.fail_on:
            raise self.fail_on[detail_url]

        day = next(day for day in self.entries if self.url_for(day) == detail_url)
        filename, description = self.entries[day]
        return ResolvedItem(
            date=day,
            image_url=f"https://example.com/images/{filename}",
            title="",
            description=description,
        )

    def download(self, item, dest_dir):
        dest_dir = Path(dest_dir)
        dest_dir.mkdir(parents=True, exist_ok=True)
        path = dest_dir / item.filename
        path.write_bytes(self.image_bytes)
        self.downloaded.append(item.filename)
        return path


class FakeSink:
    """Stand-in for PresentationSink that remembers what it was asked to present."""

    def __init__(self):
        self.presented = []

    def present(self, img_path, title="", description=""):
        self.presented.append((Path(img_path), title, description))


@pytest.fixture
def fake_site():
    return FakeSite


@pytest.fixture
def sink() -> FakeSink:
    return FakeSink()


@pytest.fixture
def ledger(tmp_path) -> Ledger:
    return Ledger(tmp_path / "images" / "wallpapers")
