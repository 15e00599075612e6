"""
Reconstruction of interest profiles from stored or untyped data.

Current payloads (snake_case, schema version 2) are validated with
jsonschema and loaded directly. Anything else, including the camelCase
shape written by older clients, is rebuilt field by field so a bad field
only costs that field.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from foryou_runtime.domain.common.coerce import coerce_float
from foryou_runtime.domain.common.ids import normalize_key
from foryou_runtime.domain.common.schema import INTEREST_PROFILE_SCHEMA, validation_error
from foryou_runtime.domain.common.text import unique_first
from foryou_runtime.domain.common.timeutils import now_iso as current_iso
from foryou_runtime.domain.primitives.interest_profile import rules
from foryou_runtime.domain.primitives.interest_profile.config import InterestProfileConfig
from foryou_runtime.domain.primitives.interest_profile.model import (
    InterestProfile,
    ProfileSignals,
    ScoreBucket,
    ScoreEntry,
)

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = InterestProfileConfig()

_LEGACY_BUCKET_KEYS = {
    rules.BY_PRODUCT_HANDLE: "byProductHandle",
    rules.BY_VENDOR: "byVendor",
    rules.BY_PRODUCT_TYPE: "byProductType",
    rules.BY_TAG: "byTag",
    rules.BY_CATEGORY: "byCategory",
    rules.BY_MATERIAL: "byMaterial",
    rules.BY_FIT: "byFit",
}


def normalize_gender(value: Any) -> str:
    normalized = normalize_key(value) if isinstance(value, str) else ""
    if normalized in (rules.GENDER_MALE, rules.GENDER_FEMALE):
        return normalized
    return rules.GENDER_UNKNOWN


def normalize_profile(
    raw: Any, now_iso: Optional[str] = None, config: InterestProfileConfig = DEFAULT_CONFIG
) -> InterestProfile:
    """Build a well-formed profile from any value; unusable input yields an empty profile."""
    now = now_iso or current_iso()
    if not isinstance(raw, dict):
        return InterestProfile.new(now)

    error = validation_error(raw, INTEREST_PROFILE_SCHEMA)
    if error is None:
        return _from_valid_payload(raw, config)

    logger.debug(f"Migrating interest profile: {error}")
    return _migrate(raw, now, config)


def _from_valid_payload(raw: dict, config: InterestProfileConfig) -> InterestProfile:
    signals = raw["signals"]
    buckets = {
        name: {key: ScoreEntry(score=float(entry["score"]), last_at=entry["last_at"]) for key, entry in signals[name].items()}
        for name in rules.BUCKETS
    }
    return InterestProfile(
        schema_version=rules.SCHEMA_VERSION,
        updated_at=raw["updated_at"],
        gender=raw["gender"],
        signals=ProfileSignals().with_buckets(
            buckets, recent_handles=tuple(signals["recent_handles"][: config.recent_handles_limit])
        ),
        recently_served_handles=tuple(
            raw["cooldowns"]["recently_served_handles"][: config.recently_served_limit]
        ),
    )


def _migrate(raw: dict, now: str, config: InterestProfileConfig) -> InterestProfile:
    signals = _pick(raw, "signals", "signals")
    if not isinstance(signals, dict):
        signals = {}
    cooldowns = _pick(raw, "cooldowns", "cooldowns")
    if not isinstance(cooldowns, dict):
        cooldowns = {}

    buckets = {
        name: normalize_score_bucket(_pick(signals, name, _LEGACY_BUCKET_KEYS[name])) for name in rules.BUCKETS
    }
    recent = normalize_recent_list(_pick(signals, "recent_handles", "recentHandles"), config.recent_handles_limit)
    served = normalize_recent_list(
        _pick(cooldowns, "recently_served_handles", "recentlyServedHandles"), config.recently_served_limit
    )
    updated_at = _pick(raw, "updated_at", "updatedAt")

    return InterestProfile(
        schema_version=rules.SCHEMA_VERSION,
        updated_at=updated_at if isinstance(updated_at, str) and updated_at else now,
        gender=normalize_gender(raw.get("gender")),
        signals=ProfileSignals().with_buckets(buckets, recent_handles=tuple(recent)),
        recently_served_handles=tuple(served),
    )


def normalize_score_bucket(bucket: Any) -> ScoreBucket:
    """Drop entries with a non-positive score or no timestamp; keys are normalized."""
    if not isinstance(bucket, dict):
        return {}
    out: ScoreBucket = {}
    for raw_key, value in bucket.items():
        key = normalize_key(raw_key)
        if not key or not isinstance(value, dict):
            continue
        score = coerce_float(value.get("score"))
        last_at = _pick(value, "last_at", "lastAt")
        if score is None or score <= 0:
            continue
        if not isinstance(last_at, str) or not last_at:
            continue
        out[key] = ScoreEntry(score=score, last_at=last_at)
    return out


def normalize_recent_list(values: Any, limit: int) -> list[str]:
    if not isinstance(values, list):
        return []
    return unique_first(values, limit)


def _pick(source: dict, key: str, legacy_key: str) -> Any:
    if key in source:
        return source[key]
    return source.get(legacy_key)
