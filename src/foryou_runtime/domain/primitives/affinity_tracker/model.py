from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ProductAffinity:
    handle: str
    raw_score: float
    view_count: int
    add_to_cart_count: int
    first_interaction_at: int
    last_interaction_at: int

    @staticmethod
    def new(handle: str, now: int) -> "ProductAffinity":
        return ProductAffinity(
            handle=handle,
            raw_score=0.0,
            view_count=0,
            add_to_cart_count=0,
            first_interaction_at=now,
            last_interaction_at=now,
        )

    def as_dict(self) -> dict:
        return {
            "handle": self.handle,
            "raw_score": self.raw_score,
            "view_count": self.view_count,
            "add_to_cart_count": self.add_to_cart_count,
            "first_interaction_at": self.first_interaction_at,
            "last_interaction_at": self.last_interaction_at,
        }


@dataclass(frozen=True)
class WeightedProduct:
    affinity: ProductAffinity
    weighted_score: float

    @property
    def handle(self) -> str:
        return self.affinity.handle
