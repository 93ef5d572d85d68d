"""
Desktop Wallpaper Handler

This module presents the newest wallpaper: it sets the desktop background and shows a
notification with the wallpaper's description. Both are done by external programs whose
command lines come from the configuration, e.g.

    background_command = ["fbsetbg", "-f", "{path}"]
    notify_command = ["zenity", "--info", "--width=600", "--height=400", "--text", "{text}"]

Placeholders: {path} is the absolute image path, {title} and {description} the wallpaper's
title and description, {text} the title and description joined. An empty command disables
that action.

The background command is run to completion and must exit with status 0. The notifier is
only launched: dialog-style notifiers such as zenity block until the user dismisses them,
and a scheduled run must not wait for that. Failing to launch it is still an error.
"""

import logging
import subprocess
from dataclasses import dataclass
from dataclasses import field
from pathlib import Path
from typing import Optional

from dailywall.errors import ExternalToolError

logger = logging.getLogger(__name__)

BACKGROUND_TIMEOUT = 60


def render_command(template: list[str], **values) -> list[str]:
    """Fill the placeholders of a command template. Raise ExternalToolError on an unknown placeholder."""

    try:
        return [argument.format(**values) for argument in template]

    except (KeyError, IndexError, ValueError) as error:
        raise ExternalToolError(
            f"Invalid placeholder in command {template}: {error}"
        ) from error


@dataclass
class PresentationSink:
    """
    Sets the desktop background and shows a notification for the newest wallpaper.
    """

    background_command: list[str] = field(default_factory=list)
    notify_command: list[str] = field(default_factory=list)
    notifier: Optional[subprocess.Popen] = field(
        default=None, init=False, repr=False, compare=False
    )

    def present(self, img_path: Path, title: str = "", description: str = "") -> None:
        """
        Update the background image to img_path and notify the user. Raise ExternalToolError if
        the image does not exist or either tool fails.
        """

        img_path = Path(img_path).expanduser().resolve()

        # subsequent operations will fail if path does not exist or is not a file, so catch this.
        if not img_path.is_file():
            raise ExternalToolError(
                f"Invalid path provided for image location: {img_path} does not exist."
            )

        text = f"{title}.  {description}" if title else description
        values = dict(path=str(img_path), title=title, description=description, text=text)

        self.set_background(render_command(self.background_command, **values))
        self.notify(render_command(self.notify_command, **values))

    def set_background(self, command: list[str]):
        if not command:
            logger.debug("No background command configured")
            return

        logger.debug("Running %s", command)

        try:
            subprocess.run(
                command,
                check=True,
                capture_output=True,
                text=True,
                timeout=BACKGROUND_TIMEOUT,
            )

        except subprocess.CalledProcessError as error:
            raise ExternalToolError(
                f"'{command[0]}' exited with status {error.returncode}: {(error.stderr or '').strip()}"
            ) from error

        except subprocess.TimeoutExpired as error:
            raise ExternalToolError(
                f"'{command[0]}' did not finish within {BACKGROUND_TIMEOUT}s"
            ) from error

        except OSError as error:
            raise ExternalToolError(f"Could not run '{command[0]}': {error}") from error

        logger.info("Desktop background updated with '%s'", command[0])

    def notify(self, command: list[str]) -> Optional[subprocess.Popen]:
        """
        Launch the notifier and return its process handle, which is also kept on the sink.
        The notifier runs in its own session and may outlive dailywall; it is never waited for.
        """

        if not command:
            logger.debug("No notify command configured")
            return None

        logger.debug("Launching %s", command)

        try:
            self.notifier = subprocess.Popen(
                command,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                start_new_session=True,
            )

        except OSError as error:
            raise ExternalToolError(f"Could not run '{command[0]}': {error}") from error

        logger.debug("Notifier '%s' running as pid %s", command[0], self.notifier.pid)
        return self.notifier
