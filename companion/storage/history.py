"""
History Store - append-only, newest-first record of successful analyses.

The whole sequence is serialized into one named record and rewritten on every
mutation. Persistence failures never propagate: a failed write keeps the
in-memory state, a corrupt or unreadable record loads as empty history.
"""

from __future__ import annotations

import sqlite3

from pydantic import ValidationError

from companion.assist.errors import HistoryItemNotFoundError
from companion.assist.types import HistoryItem, HistoryRecord
from companion.config import HISTORY_KEY
from companion.contracts.storage import KeyValueBackend
from companion.observability.logging import get_logger
from companion.observability.telemetry import counter, log_event

logger = get_logger(__name__)


class HistoryStore:
    """
    Owned, persisted history sequence.

    Args:
        backend: Injected key/value storage capability
        key: Name of the single persisted record
    """

    def __init__(self, backend: KeyValueBackend, key: str = HISTORY_KEY) -> None:
        self._backend = backend
        self._key = key
        self._items: list[HistoryItem] = []

    @property
    def items(self) -> tuple[HistoryItem, ...]:
        """Snapshot of the history, newest first."""
        return tuple(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def load(self) -> tuple[HistoryItem, ...]:
        """
        Load history from storage, replacing the in-memory sequence.

        Missing data yields empty history. Corrupt data is logged and yields
        empty history. A bare item list (browser-era format) is accepted and
        rewritten in the current format on the next append. Never raises.
        """
        try:
            raw = self._backend.read(self._key)
        except (sqlite3.Error, OSError) as e:
            counter("history.load_error")
            logger.error("Failed to load history: %s", e)
            self._items = []
            return self.items

        if raw is None:
            self._items = []
            return self.items

        try:
            record = HistoryRecord.model_validate_json(raw)
        except ValidationError as e:
            counter("history.corrupt")
            logger.error("Failed to load history, treating as empty: %s", e)
            self._items = []
            return self.items

        self._items = list(record.items)
        log_event("history.loaded", count=len(self._items))
        return self.items

    def append(self, item: HistoryItem) -> None:
        """
        Prepend ``item`` and persist the whole sequence.

        Side Effects:
            - Mutates the in-memory sequence (kept even if persisting fails)
            - Overwrites the persisted record
        """
        self._items.insert(0, item)
        counter("history.append")
        self._persist()

    def clear(self) -> None:
        """Empty history and remove the persisted record (idempotent)."""
        self._items = []
        try:
            self._backend.remove(self._key)
        except (sqlite3.Error, OSError) as e:
            counter("history.persist_error")
            logger.error("Failed to remove persisted history: %s", e)
        log_event("history.cleared")

    def get(self, item_id: str) -> HistoryItem:
        """
        Raises:
            HistoryItemNotFoundError: If no item has ``item_id``
        """
        for item in self._items:
            if item.id == item_id:
                return item
        raise HistoryItemNotFoundError(item_id)

    def _persist(self) -> None:
        payload = HistoryRecord(items=self._items).model_dump_json()
        try:
            self._backend.write(self._key, payload)
        except (sqlite3.Error, OSError) as e:
            # StorageQuotaError is an OSError
            counter("history.persist_error")
            logger.error("Failed to save history - likely quota exceeded: %s", e)
