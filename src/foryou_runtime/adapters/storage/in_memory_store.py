from __future__ import annotations

import copy
import threading
from typing import Optional

from foryou_runtime.ports.key_value_store import KeyValueStore


class InMemoryKeyValueStore(KeyValueStore):
    def __init__(self, initial: Optional[dict[str, dict]] = None) -> None:
        self._data: dict[str, dict] = copy.deepcopy(initial) if initial else {}
        self._lock = threading.Lock()

    def read(self, key: str) -> Optional[dict]:
        with self._lock:
            value = self._data.get(key)
            return copy.deepcopy(value) if value is not None else None

    def write(self, key: str, payload: dict) -> None:
        with self._lock:
            self._data[key] = copy.deepcopy(payload)

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def keys(self) -> list[str]:
        with self._lock:
            return sorted(self._data)
