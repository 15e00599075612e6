from __future__ import annotations

from foryou_runtime.domain.primitives.interest_profile.config import InterestProfileConfig
from foryou_runtime.domain.primitives.interest_profile.model import (
    EventSemantics,
    InterestEvent,
    InterestProfile,
    ProfileSignals,
    ScoreEntry,
)
from foryou_runtime.domain.primitives.interest_profile.profile import (
    apply_event,
    apply_served_cooldown,
    compact_profile,
    create_empty_profile,
    effective_score,
    get_profile_hash,
    is_cold_start,
    measure_profile_bytes,
    profile_signal_summary,
    prune_profile,
)
from foryou_runtime.domain.primitives.interest_profile.semantics import derive_event_semantics
from foryou_runtime.domain.primitives.interest_profile.serialization import (
    normalize_gender,
    normalize_profile,
)
from foryou_runtime.domain.primitives.interest_profile import rules

__all__ = [
    "EventSemantics",
    "InterestEvent",
    "InterestProfile",
    "InterestProfileConfig",
    "ProfileSignals",
    "ScoreEntry",
    "apply_event",
    "apply_served_cooldown",
    "compact_profile",
    "create_empty_profile",
    "derive_event_semantics",
    "effective_score",
    "get_profile_hash",
    "is_cold_start",
    "measure_profile_bytes",
    "normalize_gender",
    "normalize_profile",
    "profile_signal_summary",
    "prune_profile",
    "rules",
]
