from __future__ import annotations

from typing import Protocol


class DebugSink(Protocol):
    """Receives structured snapshots for inspection; must never influence ranking."""

    @property
    def enabled(self) -> bool: ...

    def publish(self, kind: str, payload: dict) -> None: ...
