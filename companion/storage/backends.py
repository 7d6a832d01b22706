"""
Key/value backends implementing companion.contracts.KeyValueBackend.

SqliteBackend stores records in the kv_store table of the companion database.
InMemoryBackend keeps them in a dict (tests, ephemeral sessions). Both enforce
a per-record byte quota, mirroring browser local storage limits.
"""

from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

from companion.config import HISTORY_BACKEND, HISTORY_MAX_BYTES
from companion.contracts.storage import KeyValueBackend
from companion.infrastructure.database import (
    db_transaction,
    get_db_connection,
    get_db_path,
    init_database,
    retry_on_db_lock,
)
from companion.observability.logging import get_logger

logger = get_logger(__name__)


class StorageQuotaError(OSError):
    """Raised when a value exceeds the backend's storage quota."""


def _check_quota(key: str, value: str, max_bytes: int | None) -> None:
    size = len(value.encode("utf-8"))
    if max_bytes is not None and size > max_bytes:
        raise StorageQuotaError(
            f"Value for '{key}' is {size} bytes, exceeding the {max_bytes}-byte quota"
        )


class InMemoryBackend:
    """Dict-backed store; contents vanish with the process."""

    def __init__(self, max_bytes: int | None = HISTORY_MAX_BYTES) -> None:
        self.max_bytes = max_bytes
        self._data: dict[str, str] = {}

    def read(self, key: str) -> str | None:
        return self._data.get(key)

    def write(self, key: str, value: str) -> None:
        _check_quota(key, value, self.max_bytes)
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)


class SqliteBackend:
    """
    SQLite-backed store using the kv_store table.

    Construction touches nothing on disk. The database file and table are
    created on first access, so an unreadable or corrupt file surfaces as
    sqlite3.Error / OSError from read, write or remove.
    """

    def __init__(self, db_path: Path | None = None, max_bytes: int | None = HISTORY_MAX_BYTES):
        self.db_path = db_path or get_db_path()
        self.max_bytes = max_bytes
        self._initialized = False

    def _ensure_schema(self) -> None:
        if not self._initialized:
            init_database(self.db_path)
            self._initialized = True

    def read(self, key: str) -> str | None:
        self._ensure_schema()
        with get_db_connection(self.db_path) as conn:
            row = conn.execute("SELECT value FROM kv_store WHERE key = ?", (key,)).fetchone()
        return row["value"] if row else None

    @retry_on_db_lock()
    def write(self, key: str, value: str) -> None:
        _check_quota(key, value, self.max_bytes)
        self._ensure_schema()
        with db_transaction(self.db_path) as conn:
            conn.execute(
                """
                INSERT INTO kv_store (key, value, updated_at) VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = excluded.updated_at
                """,
                (key, value, datetime.now(UTC).isoformat()),
            )

    @retry_on_db_lock()
    def remove(self, key: str) -> None:
        self._ensure_schema()
        with db_transaction(self.db_path) as conn:
            conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))


def create_backend(kind: str | None = None, db_path: Path | None = None) -> KeyValueBackend:
    """
    Build the configured backend ("sqlite" or "memory").

    Raises:
        ValueError: If ``kind`` is unknown
    """
    kind = (kind or HISTORY_BACKEND).lower()
    if kind == "sqlite":
        return SqliteBackend(db_path)
    if kind == "memory":
        return InMemoryBackend()
    raise ValueError(f"Unknown history backend: {kind}")
