"""
Persistence Protocol

Storage capability injected into the history store. A backend holds named
text records; the history store uses exactly one of them.
"""

from __future__ import annotations

from typing import Protocol


class KeyValueBackend(Protocol):
    """Protocol for a local persistent key/value store."""

    def read(self, key: str) -> str | None:
        """Return the stored value, or None when the key is absent."""
        ...

    def write(self, key: str, value: str) -> None:
        """Overwrite the value stored under ``key``.

        Raises:
            StorageQuotaError: If the value exceeds the backend's quota
            sqlite3.Error / OSError: On underlying storage failure
        """
        ...

    def remove(self, key: str) -> None:
        """Delete ``key``. Removing an absent key is not an error."""
        ...
