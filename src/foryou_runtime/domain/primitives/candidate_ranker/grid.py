from __future__ import annotations

import logging
from collections.abc import Iterable

from foryou_runtime.domain.catalog.model import ProductCandidate
from foryou_runtime.domain.catalog.signals import derive_signal_tags
from foryou_runtime.domain.common.hashing import seeded_jitter
from foryou_runtime.domain.common.ids import normalize_key
from foryou_runtime.domain.common.timeutils import MS_PER_DAY, now_ms
from foryou_runtime.domain.primitives.candidate_ranker.config import CandidateRankerConfig
from foryou_runtime.domain.primitives.candidate_ranker.model import RankDebug, RankedItem, RankOptions
from foryou_runtime.domain.primitives.candidate_ranker.ranker import DEFAULT_CONFIG
from foryou_runtime.domain.primitives.interest_profile import (
    InterestProfile,
    effective_score,
    rules as profile_rules,
)
from foryou_runtime.domain.primitives.product_intelligence import ProductIntelligenceCache

logger = logging.getLogger(__name__)


def _with_handles(candidates: Iterable[ProductCandidate]) -> list[ProductCandidate]:
    return [candidate for candidate in candidates if normalize_key(candidate.handle)]


def _grid_debug(personalized: float, exploration: float) -> RankDebug:
    return RankDebug(
        seed_similarity=0.0,
        user_affinity=personalized,
        exploration=exploration,
        category_penalty=0.0,
        adjacent_bonus=0.0,
        category_match=False,
        material_overlap=0,
        fit_overlap=0,
        style_overlap=0,
        normalized_overlap_count=0,
        overlap_terms=(),
        penalty_applied=0.0,
    )


def rank_grid_candidates(
    profile: InterestProfile,
    candidates: Iterable[ProductCandidate],
    options: RankOptions,
    cache: ProductIntelligenceCache,
    config: CandidateRankerConfig = DEFAULT_CONFIG,
) -> list[RankedItem]:
    """
    Rank a seedless feed for a warm profile.

    Personal interest (handle, vendor, product type, tags, recent opens and
    the affinity tracker) is blended with exploration (novelty against what
    the user already knows plus freshness) by ``options.exploration_ratio``.
    Exploration counts a little more on deeper pages.
    """
    now = now_ms() if options.now is None else options.now
    signals = profile.signals
    recent = set(signals.recent_handles)
    ratio = min(0.5, max(0.0, options.exploration_ratio))
    depth_amplifier = 1.0 + min(config.depth_amplifier_cap, max(0, options.page) * config.depth_amplifier_step)
    tracked = options.tracked_affinity

    def score(bucket_name: str, key: str) -> float:
        return effective_score(signals.bucket(bucket_name).get(key), now, options.profile_config)

    ranked: list[RankedItem] = []
    for candidate in _with_handles(candidates):
        handle = normalize_key(candidate.handle)
        vendor = normalize_key(candidate.vendor)
        product_type = normalize_key(candidate.product_type)
        tags = derive_signal_tags(
            base_tags=candidate.tags,
            handle=handle,
            vendor=vendor,
            product_type=product_type,
            title=normalize_key(candidate.title),
        )
        handle_score = score(profile_rules.BY_PRODUCT_HANDLE, handle)
        vendor_score = score(profile_rules.BY_VENDOR, vendor)
        product_type_score = score(profile_rules.BY_PRODUCT_TYPE, product_type)
        tag_score = sum(score(profile_rules.BY_TAG, tag) for tag in tags)

        personalized = (
            handle_score * config.grid_handle_weight
            + vendor_score * config.grid_vendor_weight
            + product_type_score * config.grid_product_type_weight
            + tag_score * config.grid_tag_weight
            + (config.grid_recent_boost if handle in recent else 0.0)
            + tracked.get(handle, 0.0) * config.tracked_affinity_weight
        )
        familiarity = (
            handle_score * config.familiarity_handle_weight
            + vendor_score * config.familiarity_vendor_weight
            + product_type_score * config.familiarity_product_type_weight
            + tag_score * config.familiarity_tag_weight
        )
        if candidate.created_at is None:
            age_days = config.missing_age_days
        else:
            age_days = max(0.0, (now - candidate.created_at.timestamp() * 1000) / MS_PER_DAY)
        exploration = config.novelty_weight / (1.0 + familiarity) + config.grid_freshness_weight / (
            1.0 + age_days / config.grid_freshness_days
        )

        blended = personalized * (1.0 - ratio) + exploration * ratio * depth_amplifier
        total = blended + seeded_jitter(f"{options.jitter_salt}|{handle}", config.grid_jitter_spread)
        ranked.append(
            RankedItem(
                candidate=candidate,
                score=total,
                category=cache.get(candidate).primary_category,
                debug=_grid_debug(personalized, exploration) if options.include_debug else None,
            )
        )

    ranked.sort(key=lambda item: (-item.score, item.candidate.handle))
    logger.debug(f"Ranked {len(ranked)} grid candidates for page {options.page}")
    return ranked


def rank_cold_start(
    candidates: Iterable[ProductCandidate],
    options: RankOptions,
    cache: ProductIntelligenceCache,
    config: CandidateRankerConfig = DEFAULT_CONFIG,
) -> list[RankedItem]:
    """In-stock items first, then newest first; a seeded jitter orders items of the same age."""
    keyed: list[tuple[tuple, RankedItem]] = []
    for candidate in _with_handles(candidates):
        stock = config.cold_start_stock_score if candidate.available_for_sale else -config.cold_start_stock_score
        created = candidate.created_at.timestamp() * 1000 if candidate.created_at is not None else 0.0
        jitter = seeded_jitter(f"{options.jitter_salt}|{candidate.handle}", config.cold_start_jitter_spread)
        item = RankedItem(
            candidate=candidate,
            score=stock + created / 1e12 + jitter,
            category=cache.get(candidate).primary_category,
            debug=_grid_debug(0.0, 0.0) if options.include_debug else None,
        )
        keyed.append(((-stock, -created, -jitter, candidate.handle), item))
    keyed.sort(key=lambda pair: pair[0])
    return [item for _, item in keyed]
