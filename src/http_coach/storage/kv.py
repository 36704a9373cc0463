"""Key-value stores backing the history ledger.

The ledger only needs ``get(key) -> str | None`` and ``put(key, value)``.
Two implementations ship here: an in-memory dict (default, lost on
restart) and a single JSON file on disk.  Plug in any other backend by
implementing :class:`KeyValueStore`.

Individual operations are atomic; a get followed by a put is not.
"""

from __future__ import annotations

import json
import os
import threading
from pathlib import Path
from typing import Dict, Optional, Protocol, runtime_checkable


@runtime_checkable
class KeyValueStore(Protocol):
    """String-to-string store with last-writer-wins semantics."""

    def get(self, key: str) -> Optional[str]:
        ...

    def put(self, key: str, value: str) -> None:
        ...


class InMemoryKeyValueStore:
    """Dict-backed store, safe to share between request threads."""

    def __init__(self) -> None:
        self._data: Dict[str, str] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._data.get(key)

    def put(self, key: str, value: str) -> None:
        with self._lock:
            self._data[key] = value

    def __len__(self) -> int:
        return len(self._data)


class JsonFileKeyValueStore:
    """Store every key in one JSON object on disk.

    The file is rewritten on each :meth:`put` through a temporary file and
    :func:`os.replace`, so a crash never leaves a half-written file.

    Parameters
    ----------
    path : str or Path
        Location of the JSON file.  Created on first write.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._load().get(key)

    def put(self, key: str, value: str) -> None:
        with self._lock:
            data = self._load()
            data[key] = value
            tmp = self._path.with_suffix(self._path.suffix + ".tmp")
            tmp.write_text(json.dumps(data), encoding="utf-8")
            os.replace(tmp, self._path)

    def _load(self) -> Dict[str, str]:
        if not self._path.exists():
            return {}
        return json.loads(self._path.read_text(encoding="utf-8"))

    @property
    def path(self) -> Path:
        return self._path
