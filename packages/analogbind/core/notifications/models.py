"""Notice models for non-blocking user feedback."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class NoticeLevel(str, Enum):
    """Severity of a notice."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class Notice(BaseModel):
    """A transient message for the editing surface.

    Notices never block editing. They report duplicate keys, shared output
    controls, rejected curve edits, backend failures and disabled-editor reasons.

    Example:
        >>> Notice(level=NoticeLevel.WARNING, title="Duplicate Key", message="...")
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    level: NoticeLevel = NoticeLevel.INFO
    title: str = Field(..., min_length=1)
    message: str = ""

    @classmethod
    def info(cls, title: str, message: str = "") -> Notice:
        return cls(level=NoticeLevel.INFO, title=title, message=message)

    @classmethod
    def warning(cls, title: str, message: str = "") -> Notice:
        return cls(level=NoticeLevel.WARNING, title=title, message=message)

    @classmethod
    def error(cls, title: str, message: str = "") -> Notice:
        return cls(level=NoticeLevel.ERROR, title=title, message=message)
