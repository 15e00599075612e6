from __future__ import annotations

import logging
from typing import Iterable, Optional

from foryou_runtime.domain.catalog.model import ProductCandidate
from foryou_runtime.domain.common.ids import normalize_key
from foryou_runtime.ports.catalog_source import CatalogRequest, CatalogSource

logger = logging.getLogger(__name__)


class InMemoryCatalogSource(CatalogSource):
    """Serves a fixed candidate list, in insertion order."""

    def __init__(self, candidates: Optional[Iterable[ProductCandidate]] = None) -> None:
        self._candidates: list[ProductCandidate] = list(candidates or [])
        self.requests: list[CatalogRequest] = []

    def add(self, candidate: ProductCandidate) -> None:
        self._candidates.append(candidate)

    def fetch_candidates(self, request: CatalogRequest) -> list[ProductCandidate]:
        self.requests.append(request)
        return self._candidates[: max(0, request.limit)]

    def get_by_handle(self, handle: str) -> Optional[ProductCandidate]:
        key = normalize_key(handle)
        for candidate in self._candidates:
            if normalize_key(candidate.handle) == key:
                return candidate
        logger.debug(f"Handle {key!r} not found in catalog")
        return None
