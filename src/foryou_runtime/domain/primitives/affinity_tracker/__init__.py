from __future__ import annotations

from foryou_runtime.domain.primitives.affinity_tracker.config import AffinityTrackerConfig
from foryou_runtime.domain.primitives.affinity_tracker.model import (
    ProductAffinity,
    WeightedProduct,
)
from foryou_runtime.domain.primitives.affinity_tracker.scoring import (
    decay_factor,
    rank_affinities,
    recency_multiplier,
    weighted_score,
)
from foryou_runtime.domain.primitives.affinity_tracker.serialization import (
    from_payload,
    migrate_products,
    to_payload,
)
from foryou_runtime.domain.primitives.affinity_tracker.tracker import AffinityTracker
from foryou_runtime.domain.primitives.affinity_tracker import rules

__all__ = [
    "AffinityTracker",
    "AffinityTrackerConfig",
    "ProductAffinity",
    "WeightedProduct",
    "decay_factor",
    "from_payload",
    "migrate_products",
    "rank_affinities",
    "recency_multiplier",
    "rules",
    "to_payload",
    "weighted_score",
]
