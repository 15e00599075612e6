from __future__ import annotations

import logging
import sys
from typing import Optional

from foryou_runtime.settings import get_settings


def configure_logging(level: Optional[str] = None) -> None:
    settings = get_settings()
    log_level = level or settings.log_level
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
        stream=sys.stderr,
    )


def session_extra(session_id: Optional[str]) -> dict[str, str]:
    """Structured logging context for a feed session."""
    return {"session_id": session_id} if session_id else {}
