from __future__ import annotations

import json
import logging

from foryou_runtime.ports.debug_sink import DebugSink

logger = logging.getLogger(__name__)


class LoggingDebugSink(DebugSink):
    def __init__(self, level: int = logging.DEBUG) -> None:
        self.level = level

    @property
    def enabled(self) -> bool:
        return logger.isEnabledFor(self.level)

    def publish(self, kind: str, payload: dict) -> None:
        logger.log(self.level, f"{kind} {json.dumps(payload, default=str, sort_keys=True)}", extra={"debug_kind": kind})
