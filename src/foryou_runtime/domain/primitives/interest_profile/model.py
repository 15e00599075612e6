from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Optional

from foryou_runtime.domain.primitives.interest_profile import rules

ScoreBucket = dict[str, "ScoreEntry"]


@dataclass(frozen=True)
class ScoreEntry:
    score: float
    last_at: str

    def as_dict(self) -> dict:
        return {"score": self.score, "last_at": self.last_at}


@dataclass(frozen=True)
class ProfileSignals:
    """Score buckets are plain dicts; profile functions copy before changing them."""

    by_product_handle: ScoreBucket = field(default_factory=dict)
    by_vendor: ScoreBucket = field(default_factory=dict)
    by_product_type: ScoreBucket = field(default_factory=dict)
    by_tag: ScoreBucket = field(default_factory=dict)
    by_category: ScoreBucket = field(default_factory=dict)
    by_material: ScoreBucket = field(default_factory=dict)
    by_fit: ScoreBucket = field(default_factory=dict)
    recent_handles: tuple[str, ...] = ()

    def bucket(self, name: str) -> ScoreBucket:
        if name not in rules.BUCKETS:
            raise KeyError(name)
        return getattr(self, name)

    def buckets(self) -> dict[str, ScoreBucket]:
        return {name: getattr(self, name) for name in rules.BUCKETS}

    def with_buckets(self, buckets: dict[str, ScoreBucket], **changes) -> "ProfileSignals":
        return replace(self, **buckets, **changes)


@dataclass(frozen=True)
class InterestProfile:
    schema_version: int
    updated_at: str
    gender: str
    signals: ProfileSignals
    recently_served_handles: tuple[str, ...] = ()

    @staticmethod
    def new(updated_at: str, gender: str = rules.GENDER_UNKNOWN) -> "InterestProfile":
        return InterestProfile(
            schema_version=rules.SCHEMA_VERSION,
            updated_at=updated_at,
            gender=gender,
            signals=ProfileSignals(),
        )

    def as_dict(self) -> dict:
        signals: dict = {
            name: {key: entry.as_dict() for key, entry in bucket.items()}
            for name, bucket in self.signals.buckets().items()
        }
        signals["recent_handles"] = list(self.signals.recent_handles)
        return {
            "schema_version": self.schema_version,
            "updated_at": self.updated_at,
            "gender": self.gender,
            "signals": signals,
            "cooldowns": {"recently_served_handles": list(self.recently_served_handles)},
        }


@dataclass(frozen=True)
class InterestEvent:
    type: str
    at: Optional[str] = None
    handle: Optional[str] = None
    vendor: Optional[str] = None
    product_type: Optional[str] = None
    tags: tuple[str, ...] = ()

    @staticmethod
    def new(
        type: str,
        handle: Optional[str] = None,
        vendor: Optional[str] = None,
        product_type: Optional[str] = None,
        tags: Optional[list[str]] = None,
        at: Optional[str] = None,
    ) -> "InterestEvent":
        return InterestEvent(
            type=type,
            at=at,
            handle=handle,
            vendor=vendor,
            product_type=product_type,
            tags=tuple(tags or ()),
        )


@dataclass(frozen=True)
class EventSemantics:
    category: str
    materials: tuple[str, ...]
    fits: tuple[str, ...]
