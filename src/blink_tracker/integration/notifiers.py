"""
Blink Notification

Actions fired synchronously whenever a blink is detected. The default
runs an external script; the blink counter server can be updated over
HTTP instead.
"""

import shlex
import subprocess
import urllib.error
import urllib.request
from dataclasses import dataclass
from typing import Dict, Any, List, Optional
import logging

logger = logging.getLogger(__name__)

DEFAULT_COMMAND = '/bin/bash ./blinked.sh'
DEFAULT_URL = 'http://localhost:4567/blinked'


@dataclass
class BlinkEvent:
    """A detected blink."""
    timestamp: float
    frame_index: int
    blink_count: int


class BlinkNotifier:
    """
    Base class for blink notification callbacks.
    """

    def notify(self, event: BlinkEvent) -> None:
        raise NotImplementedError

    def __call__(self, event: BlinkEvent) -> None:
        self.notify(event)


class CommandNotifier(BlinkNotifier):
    """
    Runs a shell command on every blink and waits for it to finish.
    """

    def __init__(self, command: str = DEFAULT_COMMAND):
        """
        Initialize command notifier.

        Args:
            command: Command line, split with shell rules; no arguments are added
        """
        self.command = command
        self.args = shlex.split(command)

    def notify(self, event: BlinkEvent) -> None:
        try:
            completed = subprocess.run(self.args)
        except OSError as e:
            logger.error(f"Cannot run blink command '{self.command}': {e}")
            return

        logger.debug(f"Blink command exited with status {completed.returncode}")


class HttpNotifier(BlinkNotifier):
    """
    Reports blinks to the blink counter server.
    """

    def __init__(self, url: str = DEFAULT_URL, timeout: float = 1.0):
        self.url = url
        self.timeout = timeout

    def notify(self, event: BlinkEvent) -> None:
        try:
            with urllib.request.urlopen(self.url, timeout=self.timeout) as response:
                body = response.read().decode('utf-8', errors='replace')
            logger.debug(f"Blink server counter: {body}")
        except (urllib.error.URLError, OSError) as e:
            logger.warning(f"Failed to notify {self.url}: {e}")


class LoggingNotifier(BlinkNotifier):
    """Logs each blink."""

    def notify(self, event: BlinkEvent) -> None:
        logger.info(f"Blink #{event.blink_count} at frame {event.frame_index}")


def create_notifiers(config: Optional[Dict[str, Any]]) -> List[BlinkNotifier]:
    """
    Factory function to build the notifiers named in the notification config.

    Args:
        config: Notification configuration

    Returns:
        List of notifiers, in the order they will be called
    """
    config = config or {}
    notifiers = []

    if config.get('log', True):
        notifiers.append(LoggingNotifier())

    command = config.get('command', DEFAULT_COMMAND)
    if command:
        notifiers.append(CommandNotifier(command))

    url = config.get('url')
    if url:
        notifiers.append(HttpNotifier(url, timeout=config.get('timeout', 1.0)))

    return notifiers
