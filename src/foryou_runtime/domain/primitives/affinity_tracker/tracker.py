from __future__ import annotations

import logging
import threading
from dataclasses import replace
from typing import Optional

from foryou_runtime.domain.common.ids import normalize_key
from foryou_runtime.domain.common.timeutils import Clock, now_ms
from foryou_runtime.domain.primitives.affinity_tracker import rules
from foryou_runtime.domain.primitives.affinity_tracker.config import AffinityTrackerConfig
from foryou_runtime.domain.primitives.affinity_tracker.model import (
    ProductAffinity,
    WeightedProduct,
)
from foryou_runtime.domain.primitives.affinity_tracker.scoring import rank_affinities
from foryou_runtime.domain.primitives.affinity_tracker.serialization import (
    from_payload,
    to_payload,
)
from foryou_runtime.ports.state_repository import StateRepository

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = AffinityTrackerConfig()


class AffinityTracker:
    """
    Per-session record of implicit product interest.

    The in-memory map is the source of truth while the session lives; every
    mutation is written through to the repository, which persists in the
    background. One instance per user session; all access is serialized by
    an internal lock.
    """

    def __init__(
        self,
        store_key: str,
        repository: StateRepository,
        clock: Clock = now_ms,
        config: AffinityTrackerConfig = DEFAULT_CONFIG,
    ) -> None:
        self.store_key = store_key
        self._repository = repository
        self._clock = clock
        self._config = config
        self._products: dict[str, ProductAffinity] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._products)

    def get(self, handle: str) -> Optional[ProductAffinity]:
        with self._lock:
            return self._products.get(normalize_key(handle))

    @property
    def products(self) -> dict[str, ProductAffinity]:
        with self._lock:
            return dict(self._products)

    def record_view(self, handle: str) -> Optional[ProductAffinity]:
        return self._record(handle, rules.INTERACTION_VIEW)

    def record_add_to_cart(self, handle: str) -> Optional[ProductAffinity]:
        return self._record(handle, rules.INTERACTION_ADD_TO_CART)

    def get_weighted_products(self, now: Optional[int] = None) -> list[WeightedProduct]:
        at = self._clock() if now is None else now
        with self._lock:
            affinities = list(self._products.values())
        return rank_affinities(affinities, at, self._config)

    def prune_if_needed(self) -> bool:
        """Trim to the configured bound; returns False (and writes nothing) when already within it."""
        with self._lock:
            now = self._clock()
            if not self._prune_locked(now):
                return False
            payload = to_payload(self._products, now)
        self._persist(payload)
        return True

    def load(self) -> None:
        """Replace in-memory state with the persisted state, falling back to empty."""
        now = self._clock()
        try:
            raw = self._repository.get(self.store_key)
        except Exception:
            logger.exception(f"Failed to read tracker state {self.store_key}; starting empty")
            raw = None
        products = from_payload(raw, now)
        with self._lock:
            self._products = products
            self._prune_locked(now)
            payload = to_payload(self._products, now)
            count = len(self._products)
        logger.info(f"Loaded {count} tracked products from {self.store_key}")
        if raw is not None:
            self._persist(payload)

    def reset(self) -> None:
        with self._lock:
            self._products = {}
        try:
            self._repository.reset(self.store_key)
        except Exception:
            logger.exception(f"Failed to reset tracker state {self.store_key}")

    def _record(self, handle: str, interaction: str) -> Optional[ProductAffinity]:
        key = normalize_key(handle)
        if not key:
            logger.debug(f"Ignoring {interaction} for empty handle")
            return None

        with self._lock:
            now = self._clock()
            current = self._products.get(key) or ProductAffinity.new(key, now)
            if interaction == rules.INTERACTION_ADD_TO_CART:
                updated = replace(
                    current,
                    raw_score=current.raw_score + self._config.add_to_cart_increment,
                    add_to_cart_count=current.add_to_cart_count + 1,
                    last_interaction_at=now,
                )
            else:
                updated = replace(
                    current,
                    raw_score=current.raw_score + self._config.view_increment,
                    view_count=current.view_count + 1,
                    last_interaction_at=now,
                )
            self._products[key] = updated
            self._prune_locked(now)
            payload = to_payload(self._products, now)

        self._persist(payload)
        return updated

    def _prune_locked(self, now: int) -> bool:
        limit = self._config.max_tracked_products
        if len(self._products) <= limit:
            return False
        kept = rank_affinities(list(self._products.values()), now, self._config)[:limit]
        evicted = len(self._products) - len(kept)
        self._products = {w.handle: w.affinity for w in kept}
        logger.debug(f"Pruned {evicted} tracked products from {self.store_key}")
        return True

    def _persist(self, payload: dict) -> None:
        try:
            self._repository.set(self.store_key, payload)
        except Exception:
            logger.exception(f"Failed to persist tracker state {self.store_key}")
