"""Transient user notifications (success, info, warning, error)."""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Protocol, TextIO

LOGGER = logging.getLogger(__name__)


class NotificationLevel(str, Enum):
    SUCCESS = "success"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class Notification:
    level: NotificationLevel
    message: str
    description: str


class Notifier(Protocol):
    def notify(self, notification: Notification) -> None:
        ...


class ConsoleNotifier:
    """Writes notifications to a text stream and mirrors them to logging."""

    def __init__(self, output: Optional[TextIO] = None, *, quiet: bool = False) -> None:
        self._output = output or sys.stdout
        self._quiet = quiet

    def notify(self, notification: Notification) -> None:
        LOGGER.debug(
            "notify level=%s %s: %s",
            notification.level.value,
            notification.message,
            notification.description,
        )
        if self._quiet:
            return
        tag = notification.level.value.upper()
        self._output.write(f"[{tag}] {notification.message}: {notification.description}\n")
        self._output.flush()


class NullNotifier:
    def notify(self, notification: Notification) -> None:
        del notification


def success(notifier: Notifier, description: str, *, message: str = "Success") -> None:
    notifier.notify(Notification(NotificationLevel.SUCCESS, message, description))


def info(notifier: Notifier, message: str, description: str) -> None:
    notifier.notify(Notification(NotificationLevel.INFO, message, description))


def warning(notifier: Notifier, message: str, description: str) -> None:
    notifier.notify(Notification(NotificationLevel.WARNING, message, description))


def error(notifier: Notifier, description: str, *, message: str = "Error") -> None:
    notifier.notify(Notification(NotificationLevel.ERROR, message, description))


__all__ = [
    "ConsoleNotifier",
    "Notification",
    "NotificationLevel",
    "Notifier",
    "NullNotifier",
    "error",
    "info",
    "success",
    "warning",
]
