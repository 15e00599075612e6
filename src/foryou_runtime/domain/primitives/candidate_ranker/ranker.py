from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import replace
from typing import Optional

from foryou_runtime.domain.catalog.model import ProductCandidate
from foryou_runtime.domain.catalog.signals import derive_signal_tags
from foryou_runtime.domain.common.hashing import seeded_jitter
from foryou_runtime.domain.common.ids import normalize_key
from foryou_runtime.domain.common.text import unique_first
from foryou_runtime.domain.common.timeutils import MS_PER_DAY, now_ms
from foryou_runtime.domain.primitives.candidate_ranker import rules
from foryou_runtime.domain.primitives.candidate_ranker.config import CandidateRankerConfig
from foryou_runtime.domain.primitives.candidate_ranker.model import (
    GuardResult,
    RankDebug,
    RankedItem,
    RankOptions,
    SeedTerms,
)
from foryou_runtime.domain.primitives.content_signals import extract_content_signals
from foryou_runtime.domain.primitives.interest_profile import (
    InterestProfile,
    InterestProfileConfig,
    effective_score,
    rules as profile_rules,
)
from foryou_runtime.domain.primitives.product_intelligence import (
    ProductIntelligence,
    ProductIntelligenceCache,
)

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = CandidateRankerConfig()
DEFAULT_PROFILE_CONFIG = InterestProfileConfig()


def _is_seed_term(term: str) -> bool:
    return len(term) >= 3 and term not in rules.GENERIC_SEED_TERMS and not term.isdigit()


def build_seed_terms(
    seed: ProductCandidate,
    cache: ProductIntelligenceCache,
    config: CandidateRankerConfig = DEFAULT_CONFIG,
) -> SeedTerms:
    """Term set describing the seed product: classified terms first, then tags and content."""
    derived = derive_signal_tags(
        base_tags=seed.tags,
        handle=seed.handle,
        title=seed.title,
        vendor=seed.vendor,
        product_type=seed.product_type,
    )
    content = extract_content_signals(
        description_html=seed.description_html,
        description=seed.description,
        image_alt_texts=[seed.featured_image.alt_text if seed.featured_image else None],
        handle=seed.handle,
        title=seed.title,
        vendor=seed.vendor,
        product_type=seed.product_type,
    )
    combined = unique_first(
        (term for term in (normalize_key(entry) for entry in (*derived, *content)) if _is_seed_term(term)),
        config.max_seed_signal_terms,
    )
    intelligence = cache.get(seed)
    return SeedTerms(
        seed_terms=tuple(unique_first([*intelligence.normalized_terms, *combined], config.max_seed_terms)),
        seed_derived_tags=tuple(unique_first(derived, config.max_seed_derived_tags)),
        seed_primary_category=intelligence.primary_category,
    )


def category_distance(seed_category: str, candidate_category: str) -> int:
    if seed_category == rules.UNKNOWN or candidate_category == rules.UNKNOWN:
        return rules.DISTANCE_UNKNOWN
    if seed_category == candidate_category:
        return rules.DISTANCE_SAME
    if candidate_category in rules.RELATED_CATEGORIES.get(seed_category, ()):
        return rules.DISTANCE_RELATED
    return rules.DISTANCE_UNRELATED


def _overlap_count(a: Iterable[str], b: Iterable[str]) -> int:
    lookup = {normalize_key(entry) for entry in b}
    lookup.discard("")
    return sum(1 for entry in a if normalize_key(entry) in lookup)


def _overlap_score(a: Sequence[str], b: Sequence[str], weight: float, cap: float) -> float:
    if not a or not b:
        return 0.0
    return min(cap, _overlap_count(a, b) * weight)


def term_overlap(
    seed_terms: Sequence[str],
    candidate_terms: Sequence[str],
    document_frequency: Counter,
    batch_size: int,
    config: CandidateRankerConfig = DEFAULT_CONFIG,
) -> tuple[float, tuple[str, ...]]:
    """
    Overlap between seed terms and a candidate's normalized terms.

    Each shared term earns ``term_weight * (1 + rarity) / (1 + position / scale)``
    where rarity is the share of the batch that lacks the term and position
    is the term's rank in the seed list. The total is capped.
    """
    candidate_set = set(candidate_terms)
    score = 0.0
    matched: list[str] = []
    for position, term in enumerate(seed_terms):
        if term not in candidate_set:
            continue
        rarity = 1.0 - document_frequency[term] / batch_size if batch_size else 0.0
        score += config.term_weight * (1.0 + max(0.0, rarity)) / (1.0 + position / config.term_position_scale)
        matched.append(term)
    return min(config.term_cap, score), tuple(matched)


def seed_similarity(
    seed: ProductCandidate,
    seed_intelligence: ProductIntelligence,
    candidate: ProductCandidate,
    candidate_intelligence: ProductIntelligence,
    term_score: float,
    config: CandidateRankerConfig = DEFAULT_CONFIG,
) -> float:
    score = 0.0
    if seed_intelligence.is_known and seed_intelligence.primary_category == candidate_intelligence.primary_category:
        score += config.same_category_bonus
    if seed_intelligence.sub_category and seed_intelligence.sub_category == candidate_intelligence.sub_category:
        score += config.same_sub_category_bonus

    score += _overlap_score(
        seed_intelligence.material_tokens, candidate_intelligence.material_tokens, config.material_weight, config.material_cap
    )
    score += _overlap_score(seed_intelligence.fit_tokens, candidate_intelligence.fit_tokens, config.fit_weight, config.fit_cap)
    score += _overlap_score(
        seed_intelligence.style_tokens, candidate_intelligence.style_tokens, config.style_weight, config.style_cap
    )
    score += _overlap_score(
        seed_intelligence.color_tokens, candidate_intelligence.color_tokens, config.color_weight, config.color_cap
    )
    score += term_score

    seed_vendor = normalize_key(seed.vendor)
    if seed_vendor and seed_vendor == normalize_key(candidate.vendor):
        score += config.same_vendor_bonus
    seed_type = normalize_key(seed.product_type)
    if seed_type and seed_type == normalize_key(candidate.product_type):
        score += config.same_product_type_bonus
    return score


def user_affinity(
    profile: InterestProfile,
    candidate: ProductCandidate,
    intelligence: ProductIntelligence,
    now: int,
    config: CandidateRankerConfig = DEFAULT_CONFIG,
    tracked_affinity: Optional[Mapping[str, float]] = None,
    profile_config: InterestProfileConfig = DEFAULT_PROFILE_CONFIG,
) -> float:
    """
    Decayed interest-profile signal for the candidate's handle, brand, type,
    tags and attributes, plus the affinity tracker's weighted score for the
    handle.
    """
    signals = profile.signals
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

    def score(bucket_name: str, key: str) -> float:
        return effective_score(signals.bucket(bucket_name).get(key), now, profile_config)

    handle_score = score(profile_rules.BY_PRODUCT_HANDLE, handle)
    vendor_score = score(profile_rules.BY_VENDOR, vendor)
    product_type_score = score(profile_rules.BY_PRODUCT_TYPE, product_type)
    tag_score = sum(score(profile_rules.BY_TAG, tag) for tag in tags)
    category_score = score(profile_rules.BY_CATEGORY, intelligence.primary_category)
    material_score = sum(score(profile_rules.BY_MATERIAL, token) for token in intelligence.material_tokens)
    fit_score = sum(score(profile_rules.BY_FIT, token) for token in intelligence.fit_tokens)
    tracked_score = (tracked_affinity or {}).get(handle, 0.0)

    return (
        handle_score * config.handle_affinity_weight
        + vendor_score * config.vendor_affinity_weight
        + product_type_score * config.product_type_affinity_weight
        + tag_score * config.tag_affinity_weight
        + category_score * config.category_affinity_weight
        + material_score * config.material_affinity_weight
        + fit_score * config.fit_affinity_weight
        + tracked_score * config.tracked_affinity_weight
    )


def _adjacency(distance: int, config: CandidateRankerConfig) -> float:
    if distance == rules.DISTANCE_SAME:
        return config.same_category_adjacency
    if distance == rules.DISTANCE_RELATED:
        return config.related_category_adjacency
    return config.distant_category_adjacency


def category_penalty(
    seed_category: str,
    seed_confidence: float,
    candidate_category: str,
    candidate_confidence: float,
    config: CandidateRankerConfig = DEFAULT_CONFIG,
) -> float:
    """
    Deduction for leaving the seed's category; zero when the seed is unclassified.

    The base penalty is scaled by the weaker of the two confidences so a
    shaky classification on either side costs less.
    """
    if seed_category == rules.UNKNOWN or candidate_category == seed_category:
        return 0.0
    distance = category_distance(seed_category, candidate_category)
    base = config.unrelated_category_penalty if distance >= rules.DISTANCE_UNRELATED else config.near_category_penalty
    return base * (0.5 + 0.5 * min(seed_confidence, candidate_confidence))


def _age_days(candidate: ProductCandidate, now: int, config: CandidateRankerConfig) -> float:
    if candidate.created_at is None:
        return config.missing_age_days
    created = candidate.created_at.timestamp() * 1000
    return max(0.0, (now - created) / MS_PER_DAY)


def _sort_key(item: RankedItem) -> tuple:
    created_at = item.candidate.created_at
    created = created_at.timestamp() if created_at is not None else float("-inf")
    return (-item.score, -created, item.candidate.handle)


def rank_candidates(
    seed: ProductCandidate,
    candidates: Iterable[ProductCandidate],
    profile: InterestProfile,
    options: RankOptions,
    cache: ProductIntelligenceCache,
    config: CandidateRankerConfig = DEFAULT_CONFIG,
) -> list[RankedItem]:
    """
    Score candidates against a seed product and the user's interest profile.

    Sorted by score, then newest first, then handle. The seed itself and
    candidates without a handle are skipped.
    """
    now = now_ms() if options.now is None else options.now
    seed_handle = normalize_key(seed.handle)
    terms = options.seed_terms or build_seed_terms(seed, cache, config)
    seed_category = terms.seed_primary_category
    seed_intelligence = cache.get(seed)

    pool = [
        candidate
        for candidate in candidates
        if normalize_key(candidate.handle) and normalize_key(candidate.handle) != seed_handle
    ]
    intelligences = [cache.get(candidate) for candidate in pool]
    document_frequency: Counter = Counter()
    for intelligence in intelligences:
        document_frequency.update(set(intelligence.normalized_terms))

    cold_start = len(profile.signals.by_product_handle) <= config.cold_start_max_handles
    affinity_multiplier = config.cold_affinity_multiplier if cold_start else config.warm_affinity_multiplier
    exploration_multiplier = config.cold_exploration_multiplier if cold_start else config.warm_exploration_multiplier

    ranked: list[RankedItem] = []
    for candidate, intelligence in zip(pool, intelligences):
        term_score, overlap_terms = term_overlap(
            terms.seed_terms, intelligence.normalized_terms, document_frequency, len(pool), config
        )
        similarity = seed_similarity(seed, seed_intelligence, candidate, intelligence, term_score, config)
        affinity = user_affinity(
            profile, candidate, intelligence, now, config, options.tracked_affinity, options.profile_config
        )

        category = intelligence.primary_category
        distance = category_distance(seed_category, category)
        adjacent_bonus = _adjacency(distance, config)
        exploration = adjacent_bonus / (1.0 + _age_days(candidate, now, config) / config.freshness_days)
        penalty = category_penalty(
            seed_category, seed_intelligence.confidence_score, category, intelligence.confidence_score, config
        )

        base_score = similarity + affinity * affinity_multiplier + exploration * exploration_multiplier - penalty
        score = base_score + seeded_jitter(f"{seed.handle}|{candidate.handle}|{options.page}", config.jitter_spread)

        debug = None
        if options.include_debug:
            debug = RankDebug(
                seed_similarity=similarity,
                user_affinity=affinity,
                exploration=exploration,
                category_penalty=penalty,
                adjacent_bonus=adjacent_bonus,
                category_match=seed_intelligence.primary_category == category,
                material_overlap=_overlap_count(seed_intelligence.material_tokens, intelligence.material_tokens),
                fit_overlap=_overlap_count(seed_intelligence.fit_tokens, intelligence.fit_tokens),
                style_overlap=_overlap_count(seed_intelligence.style_tokens, intelligence.style_tokens),
                normalized_overlap_count=len(overlap_terms),
                overlap_terms=overlap_terms,
                penalty_applied=penalty,
            )
        ranked.append(RankedItem(candidate=candidate, score=score, category=category, debug=debug))

    ranked.sort(key=_sort_key)
    logger.debug(f"Ranked {len(ranked)} candidates for seed {seed_handle} page {options.page}")
    return ranked


def apply_early_category_guard(
    ranked: Sequence[RankedItem],
    seed_category: str,
    page: int,
    limit: int,
    config: CandidateRankerConfig = DEFAULT_CONFIG,
) -> GuardResult:
    """
    Keep the top of the first page on the seed's category.

    Off-category items inside the early window lose ``early_guard_penalty``
    and are dropped when that pushes them below ``early_guard_drop_below``.
    """
    out: list[RankedItem] = []
    prevented = 0
    for item in ranked:
        if len(out) >= limit:
            break
        guarded = (
            seed_category != rules.UNKNOWN
            and page == 0
            and len(out) < config.early_guard_window
            and item.category != seed_category
        )
        if not guarded:
            out.append(item)
            continue
        prevented += 1
        debug = item.debug
        if debug is not None:
            debug = replace(debug, category_penalty=debug.category_penalty + config.early_guard_penalty)
        penalized = replace(item, score=item.score - config.early_guard_penalty, debug=debug)
        if penalized.score < config.early_guard_drop_below:
            continue
        out.append(penalized)
    return GuardResult(items=out, prevented=prevented)


def _diversity_key(item: RankedItem) -> str:
    return normalize_key(item.candidate.vendor) or f"h:{normalize_key(item.handle)}"


def _deduct(item: RankedItem, amount: float) -> RankedItem:
    if not amount:
        return item
    debug = item.debug
    if debug is not None:
        debug = replace(debug, penalty_applied=debug.penalty_applied + amount)
    return replace(item, score=item.score - amount, debug=debug)


def diversify_ranked(
    ranked: Sequence[RankedItem],
    recently_served: Iterable[str] = (),
    config: CandidateRankerConfig = DEFAULT_CONFIG,
) -> list[RankedItem]:
    """
    Cooldown and vendor spread over an already ranked list.

    Recently served items lose ``recently_served_penalty`` and queue behind
    every unseen item. The head of the list (``vendor_window`` slots) takes
    at most ``vendor_window_cap`` items per vendor; overflow moves to the
    tail instead of being dropped. Every repeat of a vendor costs
    ``vendor_repeat_penalty`` per earlier pick. Head and tail are re-sorted
    separately by adjusted score.
    """
    served = {normalize_key(handle) for handle in recently_served}
    served.discard("")
    unseen = [item for item in ranked if normalize_key(item.handle) not in served]
    seen = [_deduct(item, config.recently_served_penalty) for item in ranked if normalize_key(item.handle) in served]

    head: list[RankedItem] = []
    overflow: list[RankedItem] = []
    head_counts: Counter = Counter()
    for item in [*unseen, *seen]:
        key = _diversity_key(item)
        if len(head) < config.vendor_window and head_counts[key] < config.vendor_window_cap:
            head_counts[key] += 1
            head.append(item)
        else:
            overflow.append(item)

    picks: Counter = Counter()
    adjusted: list[RankedItem] = []
    for item in [*head, *overflow]:
        key = _diversity_key(item)
        adjusted.append(_deduct(item, picks[key] * config.vendor_repeat_penalty))
        picks[key] += 1

    split = len(head)
    return sorted(adjusted[:split], key=_sort_key) + sorted(adjusted[split:], key=_sort_key)
