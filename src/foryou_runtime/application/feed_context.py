from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from foryou_runtime.domain.common.ids import SessionId, normalize_key
from foryou_runtime.domain.common.timeutils import now_ms


@dataclass(frozen=True)
class FeedContext:
    """One feed request: which product seeds it and how its pages are composed."""

    seed_handle: str
    session_id: SessionId
    page_depth: int
    page_size: int
    refresh_key: str
    locale: Optional[str]
    include_debug: bool
    now: int

    @property
    def page_seed(self) -> str:
        return f"{self.session_id.value}|{self.seed_handle}|{self.refresh_key}|{self.page_depth}"

    @classmethod
    def from_args(
        cls,
        seed_handle: str,
        session_id: str,
        page_size: int,
        page_depth: int = 0,
        refresh_key: Optional[str] = None,
        locale: Optional[str] = None,
        include_debug: bool = False,
        now: Optional[int] = None,
    ) -> "FeedContext":
        return cls(
            seed_handle=normalize_key(seed_handle),
            session_id=SessionId(session_id),
            page_depth=max(0, page_depth),
            page_size=max(1, page_size),
            refresh_key=refresh_key or "0",
            locale=locale,
            include_debug=include_debug,
            now=now if now is not None else now_ms(),
        )
