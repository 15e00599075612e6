from __future__ import annotations

import logging
import math
import time
from datetime import datetime, timezone
from typing import Callable

logger = logging.getLogger(__name__)

MS_PER_HOUR = 60 * 60 * 1000
MS_PER_DAY = 24 * MS_PER_HOUR

Clock = Callable[[], int]


def now_ms() -> int:
    return int(time.time() * 1000)


def to_iso(epoch_ms: int) -> str:
    dt = datetime.fromtimestamp(epoch_ms / 1000, tz=timezone.utc)
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def now_iso() -> str:
    return to_iso(now_ms())


def parse_timestamp(value: object) -> datetime | None:
    """Parse an ISO-8601 string or datetime; anything else yields None."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, str) and value.strip():
        try:
            parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            logger.debug(f"Could not parse timestamp: {value}")
            return None
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
    return None


def parse_iso_ms(value: object) -> int | None:
    parsed = parse_timestamp(value)
    if parsed is None:
        return None
    return int(parsed.timestamp() * 1000)


def coerce_epoch_ms(value: object) -> int | None:
    """Accept finite numbers (epoch millis) or ISO strings."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return int(value) if math.isfinite(value) else None
    return parse_iso_ms(value)
