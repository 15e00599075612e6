from __future__ import annotations

from foryou_runtime.ports.debug_sink import DebugSink


class NoopDebugSink(DebugSink):
    @property
    def enabled(self) -> bool:
        return False

    def publish(self, kind: str, payload: dict) -> None:
        return None
