"""Storage - persisted key/value backends and the interaction history store"""

from companion.storage.backends import (
    InMemoryBackend,
    SqliteBackend,
    StorageQuotaError,
    create_backend,
)
from companion.storage.history import HistoryStore

__all__ = [
    "HistoryStore",
    "InMemoryBackend",
    "SqliteBackend",
    "StorageQuotaError",
    "create_backend",
]
