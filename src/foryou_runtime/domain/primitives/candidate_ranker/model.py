from __future__ import annotations

from collections.abc import Mapping
from dataclasses import asdict, dataclass, field
from typing import Optional

from foryou_runtime.domain.catalog.model import ProductCandidate
from foryou_runtime.domain.primitives.interest_profile.config import InterestProfileConfig


@dataclass(frozen=True)
class SeedTerms:
    seed_terms: tuple[str, ...]
    seed_derived_tags: tuple[str, ...]
    seed_primary_category: str


@dataclass(frozen=True)
class RankOptions:
    page: int = 0
    include_debug: bool = False
    now: Optional[int] = None
    seed_terms: Optional[SeedTerms] = None
    # Affinity tracker weighted scores by normalized handle
    tracked_affinity: Mapping[str, float] = field(default_factory=dict)
    profile_config: InterestProfileConfig = InterestProfileConfig()
    # Seedless grid only
    exploration_ratio: float = 0.0
    jitter_salt: str = ""


@dataclass(frozen=True)
class RankDebug:
    seed_similarity: float
    user_affinity: float
    exploration: float
    category_penalty: float
    adjacent_bonus: float
    category_match: bool
    material_overlap: int
    fit_overlap: int
    style_overlap: int
    normalized_overlap_count: int
    overlap_terms: tuple[str, ...]
    penalty_applied: float

    def as_dict(self) -> dict:
        out = asdict(self)
        out["overlap_terms"] = list(self.overlap_terms)
        return out


@dataclass(frozen=True)
class RankedItem:
    candidate: ProductCandidate
    score: float
    category: str
    debug: Optional[RankDebug] = None

    @property
    def handle(self) -> str:
        return self.candidate.handle

    @property
    def id(self) -> str:
        return self.candidate.id

    def as_dict(self) -> dict:
        candidate = self.candidate
        out = {
            "id": candidate.id,
            "handle": candidate.handle,
            "title": candidate.title,
            "vendor": candidate.vendor,
            "product_type": candidate.product_type,
            "tags": list(candidate.tags),
            "created_at": candidate.created_at.isoformat() if candidate.created_at else None,
            "available_for_sale": candidate.available_for_sale,
            "featured_image_url": candidate.featured_image.url if candidate.featured_image else None,
            "__score": self.score,
            "__category": self.category,
        }
        if self.debug is not None:
            out["__debug"] = self.debug.as_dict()
        return out


@dataclass(frozen=True)
class GuardResult:
    items: list[RankedItem]
    prevented: int
