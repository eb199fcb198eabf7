"""Operator notification channels."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from rich.console import Console

from ..models import NotificationEvent, NotificationLevel

LOGGER = logging.getLogger(__name__)

_LOG_LEVELS = {
    NotificationLevel.INFO: logging.INFO,
    NotificationLevel.SUCCESS: logging.INFO,
    NotificationLevel.WARNING: logging.WARNING,
    NotificationLevel.ERROR: logging.ERROR,
}


class Notifier(ABC):
    """Interface for telling the operator about session lifecycle events."""

    @abstractmethod
    def notify(self, event: NotificationEvent) -> None:
        """Send a notification event."""


class ConsoleNotifier(Notifier):
    """Print events to the terminal using Rich."""

    def __init__(self, console: Console | None = None) -> None:
        self._console = console or Console(stderr=True)

    def notify(self, event: NotificationEvent) -> None:
        style = {
            "info": "cyan",
            "warning": "yellow",
            "error": "red",
            "success": "green",
        }.get(event.level.value, "white")
        self._console.print(f"[{event.level.value.upper()}] {event.message}", style=style)
        if event.data:
            self._console.print(event.data, style="dim")


class LoggingNotifier(Notifier):
    """Forward events to the standard logger; used when no console is attached."""

    def notify(self, event: NotificationEvent) -> None:
        LOGGER.log(_LOG_LEVELS[event.level], "%s: %s", event.type, event.message)
