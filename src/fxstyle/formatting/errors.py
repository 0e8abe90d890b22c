from __future__ import annotations

from typing import Final

CANCELLED_MESSAGE: Final[str] = "⚠️ Operation cancelled by the user."


class FormattingError(Exception):
    """Base error for formula formatting operations."""


class FormattingCancelledError(FormattingError):
    """Raised when a user cancellation is observed mid-operation.

    Styles mutated in memory before the check fired are left as they are;
    callers must not commit them.
    """

    def __init__(self, message: str = CANCELLED_MESSAGE) -> None:
        super().__init__(message)


class InvalidInputError(FormattingError, ValueError):
    """Raised when the requested styles are not a structured record."""


class HostIOError(FormattingError, RuntimeError):
    """Failure reported by the spreadsheet host while reading, writing or flushing."""

    def __init__(self, message: str, *, action: str | None = None) -> None:
        super().__init__(message)
        self.action = action
