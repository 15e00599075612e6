from __future__ import annotations

import base64
import binascii
import json
import logging
from dataclasses import dataclass
from typing import Optional

from foryou_runtime.domain.common.ids import normalize_key
from foryou_runtime.domain.common.text import unique_first

logger = logging.getLogger(__name__)

MAX_CURSOR_HANDLES = 200


@dataclass(frozen=True)
class FeedCursor:
    """Opaque continuation token: the next page depth plus everything already served."""

    seed_handle: str
    page: int = 0
    refresh_key: str = "0"
    served_handles: tuple[str, ...] = ()

    def encode(self) -> str:
        payload = {
            "seed": self.seed_handle,
            "page": self.page,
            "refresh": self.refresh_key,
            "served": list(self.served_handles[:MAX_CURSOR_HANDLES]),
        }
        raw = json.dumps(payload, separators=(",", ":")).encode("utf-8")
        return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")

    def advance(self, served: list[str]) -> "FeedCursor":
        return FeedCursor(
            seed_handle=self.seed_handle,
            page=self.page + 1,
            refresh_key=self.refresh_key,
            served_handles=tuple(unique_first([*self.served_handles, *served], MAX_CURSOR_HANDLES)),
        )

    @staticmethod
    def decode(token: Optional[str], seed_handle: str) -> "FeedCursor":
        """Decode a token; anything unreadable, or issued for another seed, starts over at page 0."""
        start = FeedCursor(seed_handle=normalize_key(seed_handle))
        if not token:
            return start
        try:
            padded = token + "=" * (-len(token) % 4)
            data = json.loads(base64.urlsafe_b64decode(padded.encode("ascii")))
        except (ValueError, binascii.Error, UnicodeError) as e:
            logger.debug(f"Discarding unreadable feed cursor: {e}")
            return start
        if not isinstance(data, dict) or normalize_key(data.get("seed")) != start.seed_handle:
            return start

        page = data.get("page")
        served = data.get("served")
        refresh = data.get("refresh")
        return FeedCursor(
            seed_handle=start.seed_handle,
            page=page if isinstance(page, int) and not isinstance(page, bool) and page >= 0 else 0,
            refresh_key=refresh if isinstance(refresh, str) and refresh else "0",
            served_handles=tuple(unique_first(served, MAX_CURSOR_HANDLES)) if isinstance(served, list) else (),
        )
