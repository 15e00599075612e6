from __future__ import annotations

from foryou_runtime.domain.primitives.candidate_ranker.config import CandidateRankerConfig
from foryou_runtime.domain.primitives.candidate_ranker.model import (
    GuardResult,
    RankDebug,
    RankedItem,
    RankOptions,
    SeedTerms,
)
from foryou_runtime.domain.primitives.candidate_ranker.ranker import (
    apply_early_category_guard,
    build_seed_terms,
    category_distance,
    category_penalty,
    diversify_ranked,
    rank_candidates,
    term_overlap,
    user_affinity,
)
from foryou_runtime.domain.primitives.candidate_ranker.grid import rank_cold_start, rank_grid_candidates
from foryou_runtime.domain.primitives.candidate_ranker import rules

__all__ = [
    "CandidateRankerConfig",
    "GuardResult",
    "RankDebug",
    "RankOptions",
    "RankedItem",
    "SeedTerms",
    "apply_early_category_guard",
    "build_seed_terms",
    "category_distance",
    "category_penalty",
    "diversify_ranked",
    "rank_candidates",
    "rank_cold_start",
    "rank_grid_candidates",
    "rules",
    "term_overlap",
    "user_affinity",
]
