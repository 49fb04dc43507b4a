"""Backend store errors."""

from __future__ import annotations

from pydantic import BaseModel, Field


class BackendErrorData(BaseModel):
    """Structured data for backend store errors.

    Args:
        message: Human-readable error description
        operation: Backend call that failed (list, upsert, remove)
        scope: Profile / sub-profile the call targeted
        source_key: Source key involved (if any)
        cause: Original exception that caused this error
    """

    model_config = {"arbitrary_types_allowed": True}

    message: str
    operation: str
    scope: str | None = None
    source_key: str | None = None
    cause: BaseException | None = Field(default=None, repr=False)


class BackendError(Exception):
    """Base exception for backend store failures.

    Wraps structured error data in an exception for ergonomic error handling.

    Attributes:
        data: Structured error data (BackendErrorData)
        message: Human-readable error description
        operation: Backend call that failed
        scope: Profile / sub-profile the call targeted
        source_key: Source key involved (if any)
        cause: Original exception that caused this error
    """

    def __init__(
        self,
        *,
        message: str,
        operation: str,
        scope: str | None = None,
        source_key: str | None = None,
        cause: BaseException | None = None,
    ) -> None:
        self.data = BackendErrorData(
            message=message,
            operation=operation,
            scope=scope,
            source_key=source_key,
            cause=cause,
        )
        # Expose fields as attributes for convenience
        self.message = self.data.message
        self.operation = self.data.operation
        self.scope = self.data.scope
        self.source_key = self.data.source_key
        self.cause = self.data.cause

        super().__init__(str(self))

    def __str__(self) -> str:
        """Format error for logging and display."""
        parts = [self.message, f"operation={self.operation}"]
        if self.scope:
            parts.append(f"scope={self.scope}")
        if self.source_key:
            parts.append(f"key={self.source_key}")
        return " | ".join(parts)


class BackendUnavailableError(BackendError):
    """The store could not be reached or read."""


class MappingNotFoundError(BackendError):
    """A remove targeted a key the store does not hold."""


class MappingConflictError(BackendError):
    """A push was attempted for a record with a duplicate source key.

    The sync coordinator never raises this; conflicted records become
    pending overrides instead.
    """
