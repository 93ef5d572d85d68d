"""
dailywall Decorators

Decorators shared by the dailywall subcommands.
"""

import logging
from sys import exit
from functools import wraps

import click

from dailywall.errors import DailywallError
from dailywall.cli_utils.console import fail

logger = logging.getLogger("dailywall")


def catch_errors(func):
    """
    Catch and format errors with the "fail" console template and gracefully
    exit the application with an error code. Click's own usage errors are left
    for click to report.
    """

    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)

        except (click.ClickException, click.exceptions.Exit, click.Abort):
            raise

        except DailywallError as error:
            logger.debug("%s failed", func.__name__, exc_info=True)
            fail(str(error))
            exit(1)

        except Exception as error:
            logger.exception("Unexpected error in %s", func.__name__)
            fail(f"something unexpected happened: {error}")
            exit(1)

    return wrapper

