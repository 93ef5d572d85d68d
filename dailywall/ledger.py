"""
Ledger

The ledger is the only durable state dailywall keeps: a plain text file with one line per
synchronized day, newest first. Each line has the form

    YYYYMMDD <filename> <description>

The date is fixed width so the most recently synchronized day can be read from the first
eight characters of the file without parsing the rest of it. New records are prepended,
which keeps the file sorted newest-first without ever rewriting existing lines.

The description is free text and is escaped before being written so that it can never break
the line structure: backslash escapes are used for the backslash itself, line breaks, tabs and
the characters '&', "'" and ';'. The transform is invertible, see unescape_description().

Appending is a read-modify-write of the whole file, done through a temporary file in the same
directory that is renamed over the ledger. A crash leaves either the old or the new ledger in
place, never a half-written one. There is no locking: two dailywall processes appending at the
same time can lose one of the two records.
"""

import logging
import os
import re
import tempfile
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from typing import Iterator, Optional

from dailywall.errors import CorruptLedgerError
from dailywall.errors import FileSystemError

logger = logging.getLogger(__name__)

DATE_FORMAT = "%Y%m%d"
DATE_WIDTH = 8

ESCAPES = {
    "\\": "\\\\",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "&": "\\x26",
    "'": "\\x27",
    ";": "\\x3b",
}

UNESCAPES = {escaped: char for char, escaped in ESCAPES.items()}

_escape_pattern = re.compile("|".join(re.escape(char) for char in ESCAPES))
_unescape_pattern = re.compile(r"\\\\|\\n|\\r|\\t|\\x26|\\x27|\\x3b")


def escape_description(description: str) -> str:
    """Escape the characters that would break a ledger line."""

    return _escape_pattern.sub(lambda match: ESCAPES[match.group()], description)


def unescape_description(escaped: str) -> str:
    """Inverse of escape_description()."""

    return _unescape_pattern.sub(lambda match: UNESCAPES[match.group()], escaped)


@dataclass(frozen=True)
class WallpaperRecord:
    """One synchronized day: the wallpaper's date, its local filename and its description."""

    date: date
    filename: str
    description: str

    def to_line(self) -> str:
        """Format the record as a ledger line, without the line terminator."""

        if not self.filename or any(char.isspace() for char in self.filename):
            raise ValueError(
                f"Filename {self.filename!r} cannot be stored in the ledger."
            )

        return " ".join(
            [
                self.date.strftime(DATE_FORMAT),
                self.filename,
                escape_description(self.description),
            ]
        )

    @classmethod
    def from_line(cls, line: str) -> "WallpaperRecord":
        """Parse a ledger line. Raise ValueError if the line is malformed."""

        parts = line.rstrip("\n").split(" ", 2)

        if len(parts) < 2:
            raise ValueError(f"expected at least a date and a filename in {line!r}")

        description = parts[2] if len(parts) == 3 else ""

        return cls(
            date=parse_date(parts[0]),
            filename=parts[1],
            description=unescape_description(description),
        )


def parse_date(text: str) -> date:
    """Parse a fixed width YYYYMMDD date."""

    if len(text) != DATE_WIDTH or not text.isdigit():
        raise ValueError(f"{text!r} is not a YYYYMMDD date")

    return datetime.strptime(text, DATE_FORMAT).date()


class Ledger:
    """
    Newest-first record store backed by a text file at 'path'.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def __repr__(self):
        return f"Ledger({str(self.path)!r})"

    def exists(self) -> bool:
        return self.path.is_file()

    def ensure_exists(self) -> bool:
        """
        Create the ledger with a single blank placeholder line if it does not exist yet.
        Returns True if the file was created.
        """

        if self.path.exists():
            return False

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "x", encoding="utf-8", newline="\n") as file:
                file.write("\n")

        except FileExistsError:
            return False

        except OSError as error:
            raise FileSystemError(
                f"Could not create ledger {self.path}: {error}"
            ) from error

        logger.info("Created ledger %s", self.path)
        return True

    def read_last_date(self) -> Optional[date]:
        """
        Return the date of the most recently synchronized wallpaper, read from the first
        eight characters of the file. Returns None when the ledger does not exist yet or
        only holds the blank placeholder line.
        """

        try:
            with open(self.path, "rb") as file:
                head = file.read(DATE_WIDTH)

        except FileNotFoundError:
            return None

        except OSError as error:
            raise FileSystemError(
                f"Could not read ledger {self.path}: {error}"
            ) from error

        # a ledger that was created but never appended to
        if head == b"" or head[:1] in (b"\r", b"\n"):
            return None

        try:
            return parse_date(head.decode("ascii"))

        except ValueError as error:
            raise CorruptLedgerError(
                f"Ledger {self.path} does not start with a YYYYMMDD date: {head!r}"
            ) from error

    def read_first_line(self) -> str:
        try:
            with open(self.path, "r", encoding="utf-8", newline="") as file:
                return file.readline().rstrip("\n")

        except OSError as error:
            raise FileSystemError(
                f"Could not read ledger {self.path}: {error}"
            ) from error

    def append(self, record: WallpaperRecord) -> str:
        """
        Prepend record as the new first line of the ledger and return the line written.

        The new content is written to a temporary file next to the ledger and renamed over it.
        Afterwards the first line is read back and compared with what was written; a mismatch
        is reported as a warning only.
        """

        line = record.to_line()

        try:
            with open(self.path, "r", encoding="utf-8", newline="") as file:
                existing = file.read()

        except FileNotFoundError:
            existing = ""

        except UnicodeDecodeError as error:
            raise CorruptLedgerError(
                f"Ledger {self.path} is not valid UTF-8 text: {error}"
            ) from error

        except OSError as error:
            raise FileSystemError(
                f"Could not read ledger {self.path}: {error}"
            ) from error

        self._replace(line + "\n" + existing)
        logger.debug("Prepended %r to %s", line, self.path)

        written = self.read_first_line()
        if written != line:
            logger.warning(
                "Ledger %s starts with %r after append, expected %r",
                self.path,
                written,
                line,
            )

        return line

    def _replace(self, content: str):
        """Atomically replace the ledger's content."""

        tmp_name = None

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)

            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                newline="",
                dir=self.path.parent,
                prefix=f".{self.path.name}.",
                suffix=".tmp",
                delete=False,
            ) as tmp:
                tmp_name = tmp.name
                tmp.write(content)
                tmp.flush()
                os.fsync(tmp.fileno())

            if self.path.exists():
                os.chmod(tmp_name, self.path.stat().st_mode)

            os.replace(tmp_name, self.path)
            tmp_name = None

        except OSError as error:
            raise FileSystemError(
                f"Could not write ledger {self.path}: {error}"
            ) from error

        finally:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.remove(tmp_name)

    def records(self) -> Iterator[WallpaperRecord]:
        """Yield the ledger's records newest-first. Blank lines are skipped."""

        try:
            with open(self.path, "r", encoding="utf-8", newline="") as file:
                for number, line in enumerate(file, start=1):
                    line = line.rstrip("\r\n")
                    if not line:
                        continue

                    try:
                        yield WallpaperRecord.from_line(line)

                    except ValueError as error:
                        raise CorruptLedgerError(
                            f"Ledger {self.path} line {number}: {error}"
                        ) from error

        except FileNotFoundError:
            return

        except UnicodeDecodeError as error:
            raise CorruptLedgerError(
                f"Ledger {self.path} is not valid UTF-8 text: {error}"
            ) from error

        except OSError as error:
            raise FileSystemError(
                f"Could not read ledger {self.path}: {error}"
            ) from error
