from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class DedupeResult(Generic[T]):
    items: list[T]
    deduped: int


@dataclass(frozen=True)
class PageSelection(Generic[T]):
    items: list[T]
    exploit_count: int
    explore_count: int
    offset: int
    has_more: bool
    seed: str

    @property
    def handles(self) -> list[str]:
        return [getattr(item, "handle", "") for item in self.items]
