"""User-facing error types for the assist pipeline.

Every error carries ``message``, the text shown to the user as-is.
"""

from __future__ import annotations


class CompanionError(Exception):
    """Base class for errors surfaced to the user."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class UnsupportedInputError(CompanionError):
    """Selected file is not an acceptable image."""


class SessionBusyError(CompanionError):
    """A submission is already in flight."""

    def __init__(self, message: str = "An analysis is already in progress.") -> None:
        super().__init__(message)


class HistoryItemNotFoundError(CompanionError, KeyError):
    """No history item with the requested id."""

    def __init__(self, item_id: str) -> None:
        super().__init__(f"History item {item_id} not found")
        self.item_id = item_id

    def __str__(self) -> str:
        return self.message
