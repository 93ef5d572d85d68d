"""
dailywall Errors

Every failure that can abort a synchronization run is one of the exceptions defined here.
Modules translate lower level exceptions (requests, OSError, subprocess, strptime) into
one of these so that the CLI only has to know about a single family of errors. All of them
are fatal for the current run: the next scheduled run starts over from the same ledger state.
"""


class DailywallError(Exception):
    """Base class for all errors raised by dailywall."""

    pass


class FetchError(DailywallError):
    """Raised when an HTTP request fails or does not return a success status."""

    pass


class ParseError(DailywallError):
    """Raised when a page is missing an expected element or a date cannot be parsed."""

    pass


class CorruptLedgerError(DailywallError):
    """Raised when the ledger file exists but its content cannot be parsed."""

    pass


class FileSystemError(DailywallError):
    """Raised when creating, reading or writing a local file fails."""

    pass


class ExternalToolError(DailywallError):
    """Raised when the background setter or the notifier cannot be run or fails."""

    pass
