"""History storage: key-value backends and the bounded per-client ledger."""

from .kv import InMemoryKeyValueStore, JsonFileKeyValueStore, KeyValueStore
from .ledger import HISTORY_CAPACITY, HistoryLedger, history_key

__all__ = [
    "HISTORY_CAPACITY",
    "HistoryLedger",
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "KeyValueStore",
    "history_key",
]
