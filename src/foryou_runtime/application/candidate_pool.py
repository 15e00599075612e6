from __future__ import annotations

import logging
from collections.abc import Sequence

from foryou_runtime.domain.catalog.model import ProductCandidate
from foryou_runtime.domain.common.ids import normalize_key
from foryou_runtime.domain.primitives.interest_profile import InterestProfile
from foryou_runtime.domain.primitives.interest_profile import rules as profile_rules

logger = logging.getLogger(__name__)

MEN_TAG = "men"
WOMEN_TAG = "women"

NOVELTY_BASE_BLOCK = 24
NOVELTY_BLOCK_PER_ROUND = 10
NOVELTY_MAX_BLOCK = 120
NOVELTY_MIN_FRESH = 12
NOVELTY_MAX_FRESH = 36


def matches_gender_pool(candidate: ProductCandidate, gender: str, strict: bool = True) -> bool:
    """
    Strict: the candidate is tagged for the declared gender and not the other.
    Loose: the candidate is simply not tagged for the other gender.
    """
    if gender not in (profile_rules.GENDER_MALE, profile_rules.GENDER_FEMALE):
        return True
    tags = {normalize_key(tag) for tag in candidate.tags}
    own, other = (MEN_TAG, WOMEN_TAG) if gender == profile_rules.GENDER_MALE else (WOMEN_TAG, MEN_TAG)
    if strict:
        return own in tags and other not in tags
    return other not in tags


def filter_gender_pool(candidates: Sequence[ProductCandidate], gender: str) -> list[ProductCandidate]:
    if gender not in (profile_rules.GENDER_MALE, profile_rules.GENDER_FEMALE):
        return list(candidates)
    strict = [candidate for candidate in candidates if matches_gender_pool(candidate, gender)]
    if strict:
        return strict
    logger.debug(f"No strictly {gender} candidates in a pool of {len(candidates)}; using loose match")
    return [candidate for candidate in candidates if matches_gender_pool(candidate, gender, strict=False)]


def apply_refresh_novelty_window(
    candidates: Sequence[ProductCandidate],
    profile: InterestProfile,
    page_depth: int,
    refresh_round: int,
    page_size: int,
) -> list[ProductCandidate]:
    """
    On a pulled-to-refresh first page, hide recently served handles.

    The blocked window grows with each refresh round. When too few fresh
    candidates remain the pool is returned untouched.
    """
    if page_depth != 0 or refresh_round <= 0:
        return list(candidates)

    block_count = min(NOVELTY_MAX_BLOCK, NOVELTY_BASE_BLOCK + refresh_round * NOVELTY_BLOCK_PER_ROUND)
    blocked = {
        key for key in (normalize_key(h) for h in profile.recently_served_handles[:block_count]) if key
    }
    fresh = [candidate for candidate in candidates if normalize_key(candidate.handle) not in blocked]
    minimum_fresh = max(NOVELTY_MIN_FRESH, min(NOVELTY_MAX_FRESH, page_size))
    if len(fresh) >= minimum_fresh:
        return fresh
    return list(candidates)


def exclude_served(candidates: Sequence[ProductCandidate], served_handles: Sequence[str]) -> list[ProductCandidate]:
    """Drop products an earlier page of the same scroll already showed."""
    served = {normalize_key(handle) for handle in served_handles}
    served.discard("")
    if not served:
        return list(candidates)
    kept = [candidate for candidate in candidates if normalize_key(candidate.handle) not in served]
    logger.debug(f"Excluded {len(candidates) - len(kept)} already served candidates")
    return kept
