from __future__ import annotations

import copy
import threading

from foryou_runtime.ports.debug_sink import DebugSink


class InMemoryDebugSink(DebugSink):
    """Keeps published snapshots in memory, oldest first."""

    def __init__(self, max_events: int = 500) -> None:
        self.max_events = max_events
        self._events: list[tuple[str, dict]] = []
        self._lock = threading.Lock()

    @property
    def enabled(self) -> bool:
        return True

    def publish(self, kind: str, payload: dict) -> None:
        with self._lock:
            self._events.append((kind, copy.deepcopy(payload)))
            if len(self._events) > self.max_events:
                del self._events[0]

    @property
    def events(self) -> list[tuple[str, dict]]:
        with self._lock:
            return list(self._events)

    def of_kind(self, kind: str) -> list[dict]:
        return [payload for event_kind, payload in self.events if event_kind == kind]
