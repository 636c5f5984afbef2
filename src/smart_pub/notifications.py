"""User-facing notifications.

Components report outcomes the user should see (a failed search, an added
dependency) through a Notifier instead of printing. The base class keeps
every notification and mirrors it to the log; front ends subclass it to
render messages.
"""

import logging
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger(__name__)


class Level(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class Notification:
    level: Level
    message: str


class Notifier:
    """Collects notifications in order of emission."""

    def __init__(self) -> None:
        self.messages: list[Notification] = []

    def info(self, message: str) -> None:
        self._emit(Notification(Level.INFO, message))

    def warning(self, message: str) -> None:
        self._emit(Notification(Level.WARNING, message))

    def error(self, message: str) -> None:
        self._emit(Notification(Level.ERROR, message))

    def _emit(self, notification: Notification) -> None:
        self.messages.append(notification)
        logger.debug("[%s] %s", notification.level.value, notification.message)

    def of_level(self, level: Level) -> list[str]:
        """Return the messages emitted at the given level."""
        return [n.message for n in self.messages if n.level is level]
