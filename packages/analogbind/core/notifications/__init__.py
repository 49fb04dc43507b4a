"""User-facing notices."""

from analogbind.core.notifications.models import Notice, NoticeLevel
from analogbind.core.notifications.notifiers import (
    CollectingNotifier,
    LoggingNotifier,
    Notifier,
    NullNotifier,
)

__all__ = [
    "CollectingNotifier",
    "LoggingNotifier",
    "Notice",
    "NoticeLevel",
    "Notifier",
    "NullNotifier",
]
