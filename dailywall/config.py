"""
dailywall Configuration Management

This file handles utilities related to generating and loading variables from a configuration file.
DailywallConfig is loaded once by the CLI entry point before any command runs and handed to the
subcommands through the click context. Raise a DailywallConfigError for any issues that arise in
processing or retrieving these configuration variables.

The configuration file is "config.json" and is looked up in the directory named by the
DAILYWALL_CONFIG_DIR environment variable, defaulting to ~/.config/dailywall. A .env file in the
working directory may set that variable. When no configuration file exists the defaults below are
used as they are, so a fresh install works without any setup.

The site markup (selectors and date formats) lives in the nested SiteProfile so that a change to the
remote page layout is a change to config.json and not to the code.
"""

import json
import os
from dataclasses import asdict
from dataclasses import dataclass
from dataclasses import field
from pathlib import Path, PurePath
from typing import Optional

from dotenv import load_dotenv

from dailywall.errors import DailywallError


class DailywallConfigError(DailywallError):
    """Raise when an issue occurs with handling dailywall configuration."""

    pass


class PathEncoder(json.JSONEncoder):
    """
    custom encoder adds support for serializing pathlib objects as strings
    """

    def default(self, o):
        if isinstance(o, PurePath):
            return str(o)

        else:
            return json.JSONEncoder.default(self, o)


@dataclass
class SiteProfile:
    """
    Describes where the listing page lives and how to read it. Selectors are CSS selectors
    understood by BeautifulSoup's select(). Dates are tried against each of date_formats in
    order (strptime syntax).

    detail_title_selector is optional: when set, the title is joined ahead of the description.
    """

    base_url: str = "https://bing.gifposter.com"
    listing_path: str = ""
    listing_item_selector: str = "article.thumb"
    listing_date_selector: str = "time.date"
    listing_link_selector: str = "a"
    detail_scope_selector: str = ".detail"
    detail_date_selector: str = "time[itemprop='date']"
    detail_description_selector: str = ".description"
    detail_title_selector: Optional[str] = None
    detail_image_selector: str = "#bing_wallpaper"
    detail_image_attribute: str = "src"
    date_formats: list[str] = field(default_factory=lambda: ["%b %d, %Y", "%Y-%m-%d"])

    @property
    def listing_url(self) -> str:
        return self.base_url.rstrip("/") + "/" + self.listing_path.lstrip("/")


@dataclass
class DailywallConfig:
    """
    Dataclass to represent configuration variables for dailywall. Provides a namespace and identifiers
    for the directories and files dailywall works with, the external commands used to present the newest
    wallpaper and the site profile used to scrape the listing.

    The pattern applied is to instantiate a DailywallConfig by supplying keyword arguments from a
    deserialized json object. Application code references the attributes here and never touches
    dictionary keys. Keep the json flat except for the 'site' section.

    Command templates are lists of arguments. {path} is replaced with the image path, {title},
    {description} and {text} with the wallpaper text. An empty list disables the action.
    """

    DAILYWALL_CONFIG_DIR: Path = Path("~/.config/dailywall").expanduser()
    DAILYWALL_IMAGE_DIR: Path = Path("~/Images/bing-wallpapers").expanduser()
    DAILYWALL_LEDGER_FILE: Optional[Path] = None
    log_file: Optional[Path] = None
    request_timeout: float = 30.0
    background_command: list[str] = field(
        default_factory=lambda: ["fbsetbg", "-f", "{path}"]
    )
    notify_command: list[str] = field(
        default_factory=lambda: [
            "zenity",
            "--info",
            "--width=600",
            "--height=400",
            "--text",
            "{text}",
        ]
    )
    site: SiteProfile = field(default_factory=SiteProfile)

    def __post_init__(self):
        """
        Handle the case where a new DailywallConfig is created from JSON, which cannot
        deserialize a str into a Path or a dict into a SiteProfile.
        """

        self.DAILYWALL_CONFIG_DIR = Path(self.DAILYWALL_CONFIG_DIR).expanduser()
        self.DAILYWALL_IMAGE_DIR = Path(self.DAILYWALL_IMAGE_DIR).expanduser()
        # the ledger lives with the images unless configured otherwise
        if self.DAILYWALL_LEDGER_FILE is None:
            self.DAILYWALL_LEDGER_FILE = self.DAILYWALL_IMAGE_DIR / "wallpapers"
        self.DAILYWALL_LEDGER_FILE = Path(self.DAILYWALL_LEDGER_FILE).expanduser()

        if self.log_file is not None:
            self.log_file = Path(self.log_file).expanduser()

        if isinstance(self.site, dict):
            try:
                self.site = SiteProfile(**self.site)
            except TypeError as error:
                raise DailywallConfigError(
                    f"Invalid 'site' section in config: {error}"
                ) from error

        if self.request_timeout is not None and self.request_timeout <= 0:
            raise DailywallConfigError("request_timeout must be a positive number")

    @property
    def config_file(self) -> Path:
        return self.DAILYWALL_CONFIG_DIR / "config.json"

    def generate_config_json(self, overwrite: bool = False) -> Path:
        """
        Write the DailywallConfig to file, serializing to JSON. Returns filepath of written
        config.json file located at DAILYWALL_CONFIG_DIR.

        An existing config file is only replaced when overwrite is True.
        """

        try:
            to_json = json.dumps(
                asdict(self), sort_keys=True, indent=4, cls=PathEncoder
            )

        except TypeError as error:
            raise DailywallConfigError(
                f"There was an error trying to serialize config data to JSON: {error}"
            )

        dest_file = self.config_file

        if dest_file.exists() and not overwrite:
            raise DailywallConfigError(
                f"A config file already exists at {dest_file}. Use --force to replace it."
            )

        try:
            self.DAILYWALL_CONFIG_DIR.mkdir(parents=True, exist_ok=True)

            with open(dest_file, "w") as file:
                file.write(to_json)

        except OSError as error:
            raise DailywallConfigError(
                f"There was an error saving the configuration file: {error}."
            )

        return dest_file


def config_dir() -> Path:
    """
    Directory holding config.json: DAILYWALL_CONFIG_DIR from the environment (or a .env file),
    otherwise ~/.config/dailywall.
    """

    load_dotenv()

    try:
        return Path(os.environ["DAILYWALL_CONFIG_DIR"]).expanduser()

    except KeyError:
        return Path("~/.config/dailywall").expanduser()


def init() -> DailywallConfig:
    """Load the dailywall configuration, falling back to defaults when there is no config file."""

    directory = config_dir()
    config_src = directory / "config.json"

    if not config_src.exists():
        return DailywallConfig(DAILYWALL_CONFIG_DIR=directory)

    return load_config(config_src)


def load_config(config_src: Path = None) -> DailywallConfig:
    """
    Load a config.json from DAILYWALL_CONFIG_DIR or alternatively ~/.config/dailywall and instantiate
    variables as a DailywallConfig dataclass. Raise DailywallConfigError if the file can't be found or read.
    """

    if config_src is None:
        config_src = config_dir() / "config.json"

    try:
        with config_src.open("r") as file:

            from_json = json.loads(file.read())
            config = DailywallConfig(**from_json)

    except json.JSONDecodeError as error:
        raise DailywallConfigError(f"There was an issue reading the config: {error}")

    except FileNotFoundError as error:
        raise DailywallConfigError(f"There was an issue opening the config: {error}")

    except TypeError as error:
        raise DailywallConfigError(f"Unknown setting in the config: {error}")

    return config
