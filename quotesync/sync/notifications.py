"""Notifications emitted to the view layer."""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger(__name__)


class NotificationLevel(Enum):
    """Kind of message shown to the user."""

    INFO = "info"
    SUCCESS = "success"  # Remote data applied
    CONFLICT = "conflict"  # Remote data declined


@dataclass
class Notification:
    """A short, auto-dismissing message."""

    level: NotificationLevel
    message: str
    duration: float = 3.0


Notifier = Callable[[Notification], None]


def log_notifier(notification: Notification) -> None:
    """Notifier that only writes to the log."""
    logger.info(f"[{notification.level.value}] {notification.message}")


class NotificationLog:
    """Notifier that keeps every notification it receives."""

    def __init__(self):
        self.notifications: list[Notification] = []

    def __call__(self, notification: Notification) -> None:
        self.notifications.append(notification)

    def clear(self) -> None:
        self.notifications.clear()
