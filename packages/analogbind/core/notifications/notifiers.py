"""Notifier protocol and implementations."""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

from analogbind.core.notifications.models import Notice, NoticeLevel

logger = logging.getLogger(__name__)

_LOG_LEVELS = {
    NoticeLevel.INFO: logging.INFO,
    NoticeLevel.WARNING: logging.WARNING,
    NoticeLevel.ERROR: logging.ERROR,
}


@runtime_checkable
class Notifier(Protocol):
    """Sink for user-facing notices.

    Implementations must not raise; a failed notice is never allowed to
    interrupt an edit or a sync pass.
    """

    def notify(self, notice: Notice) -> None:
        """Deliver a notice."""
        ...


class NullNotifier:
    """Discards all notices."""

    def notify(self, notice: Notice) -> None:
        """No-op."""
        pass


class LoggingNotifier:
    """Writes notices to a logger at the matching level."""

    def __init__(self, target: logging.Logger | None = None) -> None:
        self._logger = target or logger

    def notify(self, notice: Notice) -> None:
        """Log the notice."""
        text = f"{notice.title}: {notice.message}" if notice.message else notice.title
        self._logger.log(_LOG_LEVELS[notice.level], text)


class CollectingNotifier:
    """Keeps every notice in memory, oldest first.

    Suits callers that show notices in a batch after an operation, and tests.
    """

    def __init__(self) -> None:
        self.notices: list[Notice] = []

    def notify(self, notice: Notice) -> None:
        """Append the notice."""
        self.notices.append(notice)

    def titles(self) -> list[str]:
        return [n.title for n in self.notices]

    def clear(self) -> None:
        self.notices.clear()
