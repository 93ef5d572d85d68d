"""
Tests for image_handler.py

Validate that images are downloaded to their final name only once they are complete
and valid, that existing images are never overwritten, and that failures leave
nothing behind.

*** Fixtures ***
- image_bytes, make_response (defined in conftest.py)
- tmp_path (defined by Pytest)

*** MOCKING REQUEST CALLS ***

The get() function of the requests module is patched with a
MagicMock so that no network call is made. The mocked Response is configured per test
with the status code and body that the test needs.
"""

import unittest.mock

import pytest
import requests

# following entities are tested in this module:
from dailywall.image_handler import download_image
from dailywall.image_handler import validate_image
from dailywall.image_handler import ImageDownloadError
from dailywall.image_handler import InvalidImageError
from dailywall.errors import FetchError
from dailywall.errors import FileSystemError

IMG_URL = "https://bing.gifposter.com/bing/wallpapers/FujiSnow_1920x1080.jpg"
FILENAME = "FujiSnow_1920x1080.jpg"


@unittest.mock.patch("dailywall.image_handler.requests.get")
def test_download_image_success(mock_get, make_response, image_bytes, tmp_path):
    response = make_response(content=image_bytes)
    mock_get.return_value = response

    path = download_image(IMG_URL, tmp_path / "new" / "dir", FILENAME, timeout=10)

    assert path == tmp_path / "new" / "dir" / FILENAME
    assert path.read_bytes() == image_bytes
    assert validate_image(path) == "JPEG"
    assert [p.name for p in path.parent.iterdir()] == [FILENAME]

    mock_get.assert_called_once_with(IMG_URL, stream=True, timeout=10)
    response.close.assert_called_once()


@unittest.mock.patch("dailywall.image_handler.requests.get")
def test_download_image_keeps_existing_file(mock_get, tmp_path):
    existing = tmp_path / FILENAME
    existing.write_bytes(b"downloaded by an earlier run")

    path = download_image(IMG_URL, tmp_path, FILENAME)

    assert path == existing
    assert existing.read_bytes() == b"downloaded by an earlier run"
    mock_get.assert_not_called()


@unittest.mock.patch("dailywall.image_handler.requests.get")
def test_download_image_destination_is_directory(mock_get, tmp_path):
    (tmp_path / FILENAME).mkdir()

    with pytest.raises(FileSystemError):
        download_image(IMG_URL, tmp_path, FILENAME)

    mock_get.assert_not_called()


@unittest.mock.patch("dailywall.image_handler.requests.get")
def test_download_image_status_error(mock_get, make_response, tmp_path):
    response = make_response(status_code=404, reason="Not Found")
    mock_get.return_value = response

    with pytest.raises(ImageDownloadError, match="404"):
        download_image(IMG_URL, tmp_path, FILENAME)

    assert list(tmp_path.iterdir()) == []
    response.close.assert_called_once()


@unittest.mock.patch("dailywall.image_handler.requests.get")
def test_download_image_transport_error(mock_get, tmp_path):
    mock_get.side_effect = requests.exceptions.ConnectionError("connection reset")

    # ImageDownloadError is a FetchError, which is what the sync engine propagates
    with pytest.raises(FetchError):
        download_image(IMG_URL, tmp_path, FILENAME)

    assert list(tmp_path.iterdir()) == []


@unittest.mock.patch("dailywall.image_handler.requests.get")
def test_download_image_interrupted(mock_get, make_response, tmp_path):
    response = make_response()
    response.iter_content.side_effect = requests.exceptions.ChunkedEncodingError(
        "connection broken"
    )
    mock_get.return_value = response

    with pytest.raises(ImageDownloadError):
        download_image(IMG_URL, tmp_path, FILENAME)

    assert list(tmp_path.iterdir()) == []


@unittest.mock.patch("dailywall.image_handler.requests.get")
def test_download_image_not_an_image(mock_get, make_response, tmp_path):
    mock_get.return_value = make_response(content=b"<html>Not found</html>")

    with pytest.raises(InvalidImageError):
        download_image(IMG_URL, tmp_path, FILENAME)

    assert list(tmp_path.iterdir()) == []


def test_download_image_with_session(make_response, image_bytes, tmp_path):
    session = unittest.mock.MagicMock()
    session.get.return_value = make_response(content=image_bytes)

    with unittest.mock.patch("dailywall.image_handler.requests.get") as mock_get:
        download_image(IMG_URL, tmp_path, FILENAME, session=session)

    mock_get.assert_not_called()
    session.get.assert_called_once_with(IMG_URL, stream=True, timeout=30.0)


def test_validate_image_failure(tmp_path):
    not_an_image = tmp_path / "not_an_image.txt"
    not_an_image.write_text("hello")

    with pytest.raises(InvalidImageError):
        validate_image(not_an_image)

    with pytest.raises(InvalidImageError):
        validate_image(tmp_path / "missing.jpg")
