from __future__ import annotations

from foryou_runtime.domain.primitives.page_selector.config import PageSelectorConfig
from foryou_runtime.domain.primitives.page_selector.model import DedupeResult, PageSelection
from foryou_runtime.domain.primitives.page_selector.rng import SeededRandom
from foryou_runtime.domain.primitives.page_selector.selector import (
    dedupe_candidates,
    exploration_ratio_for_depth,
    select_page,
)
from foryou_runtime.domain.primitives.page_selector import rules

__all__ = [
    "DedupeResult",
    "PageSelection",
    "PageSelectorConfig",
    "SeededRandom",
    "dedupe_candidates",
    "exploration_ratio_for_depth",
    "rules",
    "select_page",
]
