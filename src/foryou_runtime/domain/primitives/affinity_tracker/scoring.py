from __future__ import annotations

from foryou_runtime.domain.common.timeutils import MS_PER_HOUR
from foryou_runtime.domain.primitives.affinity_tracker.config import AffinityTrackerConfig
from foryou_runtime.domain.primitives.affinity_tracker.model import (
    ProductAffinity,
    WeightedProduct,
)


def hours_since(last_interaction_at: int, now: int) -> float:
    return max(0.0, (now - last_interaction_at) / MS_PER_HOUR)


def decay_factor(hours: float, half_life_hours: float) -> float:
    return 0.5 ** (hours / max(half_life_hours, 1e-9))


def recency_multiplier(hours: float, config: AffinityTrackerConfig) -> float:
    if hours < config.recent_boost_hours:
        return config.recent_boost
    if hours < config.day_boost_hours:
        return config.day_boost
    return 1.0


def weighted_score(affinity: ProductAffinity, now: int, config: AffinityTrackerConfig) -> float:
    """raw score x exponential decay x short-term recency boost."""
    hours = hours_since(affinity.last_interaction_at, now)
    return affinity.raw_score * decay_factor(hours, config.half_life_hours) * recency_multiplier(hours, config)


def rank_affinities(
    affinities: list[ProductAffinity], now: int, config: AffinityTrackerConfig
) -> list[WeightedProduct]:
    """Weighted score desc, then most recent interaction, then handle."""
    weighted = [WeightedProduct(affinity=a, weighted_score=weighted_score(a, now, config)) for a in affinities]
    weighted.sort(key=lambda w: (-w.weighted_score, -w.affinity.last_interaction_at, w.affinity.handle))
    return weighted
