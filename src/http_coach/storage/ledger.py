"""Per-client bounded audit history.

Each client's history lives under ``history:<client_id>`` as a JSON array of
audit records, newest first, capped at :data:`HISTORY_CAPACITY` entries.

Appending is a read-modify-write against the store with no locking or
compare-and-swap: two concurrent audits from the same client can both read
the same list and the later write silently drops the other's record.
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

from ..audit_logger import get_audit_logger
from ..errors import HistoryCorruptError
from ..models import AuditRecord
from .kv import KeyValueStore

HISTORY_CAPACITY = 20
KEY_PREFIX = "history:"

_log = get_audit_logger()


def history_key(client_id: str) -> str:
    return f"{KEY_PREFIX}{client_id}"


class HistoryLedger:
    """Append to and read a client's rolling audit history.

    Parameters
    ----------
    store : KeyValueStore
        Backing store.
    capacity : int
        Maximum number of records kept per client.
    """

    def __init__(self, store: KeyValueStore, capacity: int = HISTORY_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self._store = store
        self._capacity = capacity

    def append(
        self,
        client_id: str,
        record: AuditRecord,
        correlation_id: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """Prepend *record* to the client's history and return the stored list.

        Raises
        ------
        HistoryCorruptError
            If the existing value is not a JSON array.  The stored value is
            left untouched.
        """
        key = history_key(client_id)
        history = self._load(key)
        history.insert(0, record.to_dict())
        dropped = max(0, len(history) - self._capacity)
        history = history[: self._capacity]
        self._store.put(key, json.dumps(history))

        _log.history_appended(correlation_id, client_id, len(history), dropped)
        return history

    def read(self, client_id: Optional[str]) -> List[Dict[str, Any]]:
        """Return the client's history, newest first.

        An unknown or absent client yields an empty list.
        """
        if not client_id:
            return []
        return self._load(history_key(client_id))

    def _load(self, key: str) -> List[Dict[str, Any]]:
        raw = self._store.get(key)
        if raw is None:
            return []
        try:
            history = json.loads(raw)
        except ValueError as err:
            raise HistoryCorruptError(key, str(err)) from err
        if not isinstance(history, list):
            raise HistoryCorruptError(key, f"expected a list, got {type(history).__name__}")
        return history

    @property
    def capacity(self) -> int:
        return self._capacity
