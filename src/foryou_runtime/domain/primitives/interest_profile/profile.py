from __future__ import annotations

import json
import logging
import math
from collections.abc import Iterable, Sequence
from dataclasses import replace
from typing import Optional

from foryou_runtime.domain.catalog.signals import derive_signal_tags
from foryou_runtime.domain.common.hashing import stable_hash_hex
from foryou_runtime.domain.common.ids import normalize_key
from foryou_runtime.domain.common.text import unique_first
from foryou_runtime.domain.common.timeutils import (
    MS_PER_DAY,
    MS_PER_HOUR,
    now_ms,
    parse_iso_ms,
    to_iso,
)
from foryou_runtime.domain.common.timeutils import now_iso as current_iso
from foryou_runtime.domain.primitives.interest_profile import rules
from foryou_runtime.domain.primitives.interest_profile.config import InterestProfileConfig
from foryou_runtime.domain.primitives.interest_profile.model import (
    InterestEvent,
    InterestProfile,
    ScoreBucket,
    ScoreEntry,
)
from foryou_runtime.domain.primitives.interest_profile.semantics import (
    UNKNOWN_CATEGORY,
    derive_event_semantics,
)
from foryou_runtime.domain.primitives.interest_profile.serialization import (
    DEFAULT_CONFIG,
    normalize_gender,
)

logger = logging.getLogger(__name__)


def create_empty_profile(now_iso: Optional[str] = None) -> InterestProfile:
    return InterestProfile.new(now_iso or current_iso())


def effective_score(
    entry: Optional[ScoreEntry], now: Optional[int] = None, config: InterestProfileConfig = DEFAULT_CONFIG
) -> float:
    """Stored score decayed by ``0.5 ** (age_hours / half_life_hours)``."""
    if entry is None:
        return 0.0
    score = entry.score
    if not math.isfinite(score) or score <= 0:
        return 0.0
    last_at = parse_iso_ms(entry.last_at)
    if last_at is None:
        return score
    at = now_ms() if now is None else now
    age_hours = max(0.0, (at - last_at) / MS_PER_HOUR)
    return score * 0.5 ** (age_hours / max(1.0, config.half_life_hours))


def sum_effective(bucket: ScoreBucket, keys: Iterable[str], now: int, config: InterestProfileConfig) -> float:
    return sum(effective_score(bucket.get(key), now, config) for key in keys)


def apply_event(
    profile: InterestProfile,
    event: InterestEvent,
    now_iso: Optional[str] = None,
    config: InterestProfileConfig = DEFAULT_CONFIG,
) -> InterestProfile:
    """Fold one interaction into a new profile; the input profile is left untouched."""
    if event.type not in rules.EVENT_TYPES:
        logger.warning(f"Ignoring unsupported interest event type {event.type!r}")
        return profile

    now = now_iso or event.at or current_iso()
    buckets = {name: dict(bucket) for name, bucket in profile.signals.buckets().items()}
    recent = list(profile.signals.recent_handles)

    handle = normalize_key(event.handle)
    vendor = normalize_key(event.vendor)
    product_type = normalize_key(event.product_type)
    tags = derive_signal_tags(base_tags=event.tags, handle=handle, vendor=vendor, product_type=product_type)
    semantics = derive_event_semantics(tags, product_type=product_type, handle=handle, vendor=vendor)

    def bump(bucket_name: str, key: str) -> None:
        _bump_score(buckets[bucket_name], key, rules.EVENT_WEIGHTS[bucket_name][event.type], now, config)

    if handle:
        bump(rules.BY_PRODUCT_HANDLE, handle)
        recent = [handle, *(entry for entry in recent if entry != handle)][: config.recent_handles_limit]
    if vendor:
        bump(rules.BY_VENDOR, vendor)
    if product_type:
        bump(rules.BY_PRODUCT_TYPE, product_type)
    for tag in tags:
        bump(rules.BY_TAG, tag)
    if semantics.category != UNKNOWN_CATEGORY:
        bump(rules.BY_CATEGORY, semantics.category)
    for material in semantics.materials:
        bump(rules.BY_MATERIAL, material)
    for fit in semantics.fits:
        bump(rules.BY_FIT, fit)

    return replace(
        profile,
        updated_at=now,
        signals=profile.signals.with_buckets(buckets, recent_handles=tuple(recent)),
    )


def _bump_score(bucket: ScoreBucket, key: str, delta: float, now: str, config: InterestProfileConfig) -> None:
    if not key or not math.isfinite(delta) or delta <= 0:
        return
    current = bucket.get(key)
    score = min(config.max_entry_score, max(0.0, (current.score if current else 0.0) + delta))
    bucket[key] = ScoreEntry(score=score, last_at=now)


def _top_entries(bucket: ScoreBucket, cap: int, now: int, config: InterestProfileConfig) -> ScoreBucket:
    ranked = sorted(bucket.items(), key=lambda item: -effective_score(item[1], now, config))
    return dict(ranked[: max(0, cap)])


def prune_profile(
    profile: InterestProfile, now: Optional[int] = None, config: InterestProfileConfig = DEFAULT_CONFIG
) -> InterestProfile:
    """
    Bound the profile: drop stale or non-positive entries, keep the strongest
    entries per bucket, then compact until the serialized form fits the
    configured byte budget.
    """
    at = now_ms() if now is None else now
    oldest_allowed = at - config.max_age_days * MS_PER_DAY

    def keep(entry: ScoreEntry) -> bool:
        ts = parse_iso_ms(entry.last_at)
        return ts is not None and ts >= oldest_allowed and entry.score > 0

    buckets = {
        name: _top_entries(
            {key: entry for key, entry in bucket.items() if keep(entry)}, config.max_bucket_entries, at, config
        )
        for name, bucket in profile.signals.buckets().items()
    }
    pruned = replace(
        profile,
        updated_at=to_iso(at),
        signals=profile.signals.with_buckets(
            buckets, recent_handles=profile.signals.recent_handles[: config.recent_handles_limit]
        ),
        recently_served_handles=profile.recently_served_handles[: config.recently_served_limit],
    )
    return compact_profile(pruned, config.max_json_bytes, at, config)


def measure_profile_bytes(profile: InterestProfile) -> int:
    return len(json.dumps(profile.as_dict(), separators=(",", ":")).encode("utf-8"))


def compact_profile(
    profile: InterestProfile, max_bytes: int, now: int, config: InterestProfileConfig = DEFAULT_CONFIG
) -> InterestProfile:
    if measure_profile_bytes(profile) <= max_bytes:
        return profile

    current = profile
    for cap in config.compaction_caps:
        buckets = {
            name: _top_entries(bucket, max(1, math.floor(cap * rules.COMPACTION_RATIOS[name])), now, config)
            for name, bucket in current.signals.buckets().items()
        }
        current = replace(
            current,
            signals=current.signals.with_buckets(
                buckets,
                recent_handles=current.signals.recent_handles[: min(config.recent_handles_limit, cap)],
            ),
            recently_served_handles=current.recently_served_handles[: min(config.recently_served_limit, cap * 2)],
        )
        if measure_profile_bytes(current) <= max_bytes:
            logger.info(f"Compacted interest profile to per-bucket cap {cap}")
            return current

    buckets = {name: _top_entries(bucket, 1, now, config) for name, bucket in current.signals.buckets().items()}
    buckets[rules.BY_TAG] = {}
    current = replace(
        current,
        signals=current.signals.with_buckets(buckets, recent_handles=current.signals.recent_handles[:8]),
        recently_served_handles=current.recently_served_handles[:16],
    )
    if measure_profile_bytes(current) <= max_bytes:
        return current

    logger.warning("Interest profile exceeds size budget after compaction; resetting signals")
    return InterestProfile.new(to_iso(now), gender=normalize_gender(profile.gender))


def apply_served_cooldown(
    profile: InterestProfile,
    served_handles: Iterable[str],
    now_iso: Optional[str] = None,
    config: InterestProfileConfig = DEFAULT_CONFIG,
) -> InterestProfile:
    """Put freshly served handles at the front of the cooldown list."""
    now = now_iso or current_iso()
    merged = unique_first(
        [*(normalize_key(handle) for handle in served_handles), *profile.recently_served_handles],
        config.recently_served_limit,
    )
    updated = replace(profile, updated_at=now, recently_served_handles=tuple(merged))
    at = parse_iso_ms(now)
    return prune_profile(updated, at if at is not None else now_ms(), config)


def is_cold_start(
    profile: InterestProfile, now: Optional[int] = None, config: InterestProfileConfig = DEFAULT_CONFIG
) -> bool:
    at = now_ms() if now is None else now
    for name in rules.COLD_START_BUCKETS:
        bucket = profile.signals.bucket(name)
        if sum_effective(bucket, bucket.keys(), at, config) >= config.cold_start_threshold:
            return False
    return True


def get_profile_hash(
    profile: InterestProfile,
    config: InterestProfileConfig = DEFAULT_CONFIG,
    tracked_handles: Sequence[str] = (),
) -> str:
    """
    Short fingerprint of the strongest keys per bucket plus the declared gender.

    ``tracked_handles`` are the affinity tracker's strongest handles, best
    first; when given, the leading ones are part of the fingerprint.
    """

    def top_keys(bucket: ScoreBucket) -> list[str]:
        ranked = sorted(bucket.items(), key=lambda item: -item[1].score)
        return [key for key, _ in ranked[: config.hash_top_keys]]

    payload: dict = {"gender": profile.gender}
    for name, bucket in profile.signals.buckets().items():
        payload[rules.HASH_KEYS[name]] = top_keys(bucket)
    tracked = [key for key in (normalize_key(handle) for handle in tracked_handles) if key]
    if tracked:
        payload["tracked"] = tracked[: config.hash_tracked_handles]
    return stable_hash_hex(json.dumps(payload, separators=(",", ":")))


def profile_signal_summary(
    profile: InterestProfile, now: Optional[int] = None, config: InterestProfileConfig = DEFAULT_CONFIG
) -> dict:
    at = now_ms() if now is None else now
    summary: dict = {
        "updated_at": profile.updated_at,
        "gender": profile.gender,
        "cold_start": is_cold_start(profile, at, config),
        "recent_handles": list(profile.signals.recent_handles[: config.summary_top_keys]),
        "recently_served_count": len(profile.recently_served_handles),
    }
    for name, bucket in profile.signals.buckets().items():
        ranked = sorted(
            ((key, effective_score(entry, at, config)) for key, entry in bucket.items()),
            key=lambda item: -item[1],
        )
        summary[name] = [
            {"key": key, "effective_score": round(score, 4)} for key, score in ranked[: config.summary_top_keys]
        ]
    return summary
