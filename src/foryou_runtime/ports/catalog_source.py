from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Protocol

from foryou_runtime.domain.catalog.model import ProductCandidate


@dataclass(frozen=True)
class CatalogRequest:
    seed_handle: Optional[str] = None
    terms: tuple[str, ...] = ()
    limit: int = 220
    locale: Optional[str] = None


class CatalogSource(Protocol):
    def fetch_candidates(self, request: CatalogRequest) -> Iterable[ProductCandidate]: ...

    def get_by_handle(self, handle: str) -> Optional[ProductCandidate]: ...
