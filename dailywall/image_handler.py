"""
Image Handler

Downloads wallpaper images. Only plain GET requests for image files specified by URL are
supported, with no expectation of authentication. Finding out which image to download is
the job of the site handler.

The body is streamed to a temporary '.part' file next to the destination, checked with Pillow
to make sure the server actually sent an image, and only then renamed to its final name. An
image that is already present at its final name is never overwritten: it can only have been
written completely by an earlier run, so it is reused as it is.
"""

import logging
import os
from pathlib import Path
from typing import Optional

import requests
from PIL import Image, UnidentifiedImageError

from dailywall.errors import FetchError
from dailywall.errors import FileSystemError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


class ImageDownloadError(FetchError):
    """
    Raised when an image download is unsuccessful.
    """

    pass


class InvalidImageError(FetchError):
    """
    Raised when downloaded content is not an image. Wrapper around the PIL
    UnidentifiedImageError for better identification of errors during debugging
    and custom error messaging.
    """

    pass


def validate_image(input) -> str:
    """
    Determine whether input is a valid image and return its format (e.g. 'JPEG'). PIL open accepts a
    Path object, string, or file object. The PIL method reads the content header to determine file
    type but doesn't load the pixel data, so it is cheap enough to run on every download.
    """

    try:
        with Image.open(input) as image:

            return image.format

    except UnidentifiedImageError:
        raise InvalidImageError(f"Input {str(input)} does not appear to be an image.")

    except FileNotFoundError:
        raise InvalidImageError(f"Input {str(input)} could not be found.")


def download_image(
    url: str,
    dest_dir: Path,
    filename: str,
    session: Optional[requests.Session] = None,
    timeout: Optional[float] = 30.0,
) -> Path:
    """
    Download the image at url to dest_dir / filename and return the path it was saved at.
    dest_dir is created if it does not exist.

    If the file already exists it is left untouched and its path is returned. If downloading
    fails for one of various reasons an appropriate error is raised and nothing is left behind.
    """

    dest_dir = Path(dest_dir).expanduser()
    destination_path = dest_dir / filename

    # edge case where destination path is a folder
    if destination_path.is_dir():
        raise FileSystemError(f"Destination file {destination_path} is a directory.")

    if destination_path.exists():
        logger.warning(
            "%s already exists, keeping the existing file", destination_path
        )
        return destination_path

    try:
        dest_dir.mkdir(parents=True, exist_ok=True)

    except OSError as error:
        raise FileSystemError(f"Could not create {dest_dir}: {error}") from error

    get = session.get if session is not None else requests.get

    try:
        r = get(url, stream=True, timeout=timeout)

    except requests.exceptions.RequestException as error:
        raise ImageDownloadError(f"Could not download image from {url}: {error}") from error

    part_path = dest_dir / f"{filename}.part"

    try:
        # successful request but received a bad response from the server.
        try:
            r.raise_for_status()
        except requests.exceptions.HTTPError as error:
            raise ImageDownloadError(
                f"Download error: something went wrong trying to access {url} (status code {r.status_code})"
            ) from error

        try:
            with open(part_path, "wb") as output:
                for chunk in r.iter_content(chunk_size=CHUNK_SIZE):
                    output.write(chunk)

        except requests.exceptions.RequestException as error:
            raise ImageDownloadError(
                f"Download of {url} was interrupted: {error}"
            ) from error

        except OSError as error:
            raise FileSystemError(
                f"Could not write image to {part_path}: {error}"
            ) from error

        # successful request but did not get back image data as the response.
        try:
            image_format = validate_image(part_path)
        except InvalidImageError:
            raise InvalidImageError(
                f"Download error: the target resource at {url} does not appear to be an image."
            )

        try:
            os.replace(part_path, destination_path)
        except OSError as error:
            raise FileSystemError(
                f"Could not move image to {destination_path}: {error}"
            ) from error

    finally:
        r.close()
        if part_path.exists():
            part_path.unlink()

    logger.info("Saved %s image %s", image_format, destination_path)
    return destination_path
