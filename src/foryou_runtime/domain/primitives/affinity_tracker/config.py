from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class AffinityTrackerConfig:
    max_tracked_products: int = 200
    half_life_hours: float = 72.0
    view_increment: float = 1.0
    add_to_cart_increment: float = 4.0
    # Short-term recency boost, checked in order
    recent_boost_hours: float = 6.0
    recent_boost: float = 1.25
    day_boost_hours: float = 24.0
    day_boost: float = 1.1
