from __future__ import annotations

from typing import Optional, Protocol


class StateRepository(Protocol):
    """
    Persistence seam for tracker and profile state.

    ``set`` and ``reset`` are fire-and-forget: they return before any
    write completes and never raise on storage failure.
    """

    def get(self, key: str) -> Optional[dict]: ...

    def set(self, key: str, payload: dict) -> None: ...

    def reset(self, key: str) -> None: ...
