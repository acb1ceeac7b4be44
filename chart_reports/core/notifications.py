"""User-facing, non-blocking notifications.

Operations that fail are caught where they were issued and turned into a
``Notification`` instead of propagating. Each notification carries a key
(``png-<chart>``, ``insight-<chart>``...) so a later message for the same
operation replaces the earlier one, the way toast ids behave in a UI.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from .enums import NotificationLevel
from .errors import (
    ChartDataError,
    ExportError,
    FetchError,
    InsightGenerationError,
    ValidationError,
)
from .logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class Notification:
    level: NotificationLevel
    message: str
    key: str | None = None


NotificationSink = Callable[[Notification], None]


def describe_failure(error: Exception, operation: str) -> str:
    """Map an exception to the message shown to the user."""
    if isinstance(error, (ValidationError, ChartDataError, ExportError)):
        return f"{operation}: {error}"
    if isinstance(error, InsightGenerationError):
        return f"{operation}. Please try again."
    if isinstance(error, FetchError):
        return f"{operation}. Service temporarily unavailable."
    return f"{operation}. An unexpected error occurred."


class Notifier:
    """Collects notifications and forwards them to an optional sink.

    A muted notifier (the view was closed) still logs but no longer records or
    forwards anything.
    """

    def __init__(self, sink: NotificationSink | None = None) -> None:
        self.sink = sink
        self.history: list[Notification] = []
        self.active: dict[str, Notification] = {}
        self.muted = False

    def notify(self, level: NotificationLevel, message: str, key: str | None = None) -> None:
        if self.muted:
            logger.debug("Notification suppressed", extra={"level": level.value, "key": key})
            return
        note = Notification(level=level, message=message, key=key)
        self.history.append(note)
        if key is not None:
            self.active[key] = note
        if self.sink is not None:
            self.sink(note)

    def loading(self, message: str, key: str | None = None) -> None:
        self.notify(NotificationLevel.LOADING, message, key)

    def success(self, message: str, key: str | None = None) -> None:
        self.notify(NotificationLevel.SUCCESS, message, key)

    def info(self, message: str, key: str | None = None) -> None:
        self.notify(NotificationLevel.INFO, message, key)

    def error(self, message: str, key: str | None = None) -> None:
        self.notify(NotificationLevel.ERROR, message, key)

    def notify_failure(self, error: Exception, operation: str, key: str | None = None) -> None:
        """Log the full error and raise a sanitized error notification."""
        logger.error(
            f"{operation}: {error}",
            extra={"key": key, "error_type": type(error).__name__},
            exc_info=not isinstance(error, (ValidationError, ChartDataError)),
        )
        self.error(describe_failure(error, operation), key)

    def mute(self) -> None:
        self.muted = True

    def errors(self) -> list[Notification]:
        return [n for n in self.history if n.level is NotificationLevel.ERROR]
