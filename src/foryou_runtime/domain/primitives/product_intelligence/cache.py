from __future__ import annotations

import logging
import threading
from typing import Optional

from foryou_runtime.domain.catalog.model import ProductCandidate
from foryou_runtime.domain.primitives.product_intelligence import rules
from foryou_runtime.domain.primitives.product_intelligence.classifier import (
    DEFAULT_CONFIG,
    build_product_intelligence,
)
from foryou_runtime.domain.primitives.product_intelligence.config import (
    ProductIntelligenceConfig,
)
from foryou_runtime.domain.primitives.product_intelligence.model import ProductIntelligence
from foryou_runtime.ports.debug_sink import DebugSink

logger = logging.getLogger(__name__)


class ProductIntelligenceCache:
    """
    Bounded memoization of product classifications.

    Keyed by normalized handle (falling back to id). Repeat lookups return
    the same object; once the cache exceeds ``config.cache_size`` entries
    the oldest inserted key is evicted.
    """

    def __init__(
        self,
        config: ProductIntelligenceConfig = DEFAULT_CONFIG,
        debug_sink: Optional[DebugSink] = None,
    ) -> None:
        self._config = config
        self._debug_sink = debug_sink
        self._entries: dict[str, ProductIntelligence] = {}
        self._sample_count = 0
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    def get(self, candidate: ProductCandidate) -> ProductIntelligence:
        key = candidate.cache_key
        if not key:
            return self._build(candidate)

        with self._lock:
            cached = self._entries.get(key)
        if cached is not None:
            return cached

        # Built outside the lock; a concurrent build of the same key is harmless
        built = self._build(candidate)
        with self._lock:
            existing = self._entries.setdefault(key, built)
            if len(self._entries) > self._config.cache_size:
                oldest = next(iter(self._entries))
                del self._entries[oldest]
                logger.debug(f"Evicted intelligence cache entry {oldest}")
        return existing

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._sample_count = 0

    def _build(self, candidate: ProductCandidate) -> ProductIntelligence:
        result = build_product_intelligence(candidate, self._config)
        self._maybe_sample(candidate, result)
        return result

    def _maybe_sample(self, candidate: ProductCandidate, result: ProductIntelligence) -> None:
        sink = self._debug_sink
        if sink is None or not sink.enabled:
            return
        with self._lock:
            if self._sample_count >= self._config.debug_sample_limit:
                return
            self._sample_count += 1
        sink.publish(rules.SAMPLE_KIND, result.sample(candidate.handle))
