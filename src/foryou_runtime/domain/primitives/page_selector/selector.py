from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Sequence
from typing import Any, Optional, TypeVar

from foryou_runtime.domain.common.ids import normalize_key
from foryou_runtime.domain.primitives.page_selector import rules
from foryou_runtime.domain.primitives.page_selector.config import PageSelectorConfig
from foryou_runtime.domain.primitives.page_selector.model import DedupeResult, PageSelection
from foryou_runtime.domain.primitives.page_selector.rng import SeededRandom

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_CONFIG = PageSelectorConfig()


def dedupe_key(item: Any) -> str:
    return normalize_key(getattr(item, "handle", None)) or normalize_key(getattr(item, "id", None))


def dedupe_candidates(items: Iterable[T]) -> DedupeResult[T]:
    """
    Keep the first item per normalized handle (falling back to id).

    Items with neither are dropped without being counted as duplicates.
    """
    seen: set[str] = set()
    out: list[T] = []
    deduped = 0
    for item in items:
        key = dedupe_key(item)
        if not key:
            continue
        if key in seen:
            deduped += 1
            continue
        seen.add(key)
        out.append(item)
    return DedupeResult(items=out, deduped=deduped)


def exploration_ratio_for_depth(depth: int) -> float:
    if depth < 0:
        depth = 0
    if depth < len(rules.DEPTH_EXPLORATION_RATIOS):
        return rules.DEPTH_EXPLORATION_RATIOS[depth]
    return rules.DEEP_EXPLORATION_RATIO


def select_page(
    ranked: Sequence[T],
    page_size: int,
    page_depth: int = 0,
    exploration_ratio: float = DEFAULT_CONFIG.default_exploration_ratio,
    seed: str = "",
    config: PageSelectorConfig = DEFAULT_CONFIG,
    offset: Optional[int] = None,
) -> PageSelection[T]:
    """
    Cut one feed page out of a ranked list.

    The window starts at ``page_depth * page_size`` unless ``offset`` is
    given. Any positive ratio reserves ``ceil(ratio * page_size)`` slots for
    exploration; the remaining front of the window is exploited in order.
    Explored items are sampled without replacement from the rest of the list
    and inserted at generator-chosen positions. All draws come from a
    generator seeded by ``seed``, so the same seed and ranked input always
    produce the same page.
    """
    size = max(0, int(page_size))
    depth = max(0, int(page_depth))
    ratio = min(config.max_exploration_ratio, max(0.0, exploration_ratio))
    rng = SeededRandom(seed)

    start = depth * size if offset is None else max(0, int(offset))
    window = list(ranked[start:])
    explore_target = math.ceil(ratio * size - 1e-9) if ratio > 0 else 0
    if config.anchor_first_slot and size > 0:
        explore_target = min(explore_target, size - 1)
    exploit = window[: size - explore_target]
    tail = window[len(exploit):]

    explore: list[T] = []
    for _ in range(min(size - len(exploit), len(tail))):
        explore.append(tail.pop(rng.next_int(len(tail))))

    page = list(exploit)
    first_slot = 1 if config.anchor_first_slot and page else 0
    for item in explore:
        page.insert(first_slot + rng.next_int(len(page) - first_slot + 1), item)

    result = dedupe_candidates(page)
    if result.deduped:
        logger.warning(f"Removed {result.deduped} duplicate items from page {depth} (seed={seed!r})")

    return PageSelection(
        items=result.items,
        exploit_count=len(exploit),
        explore_count=len(explore),
        offset=start,
        has_more=start + size < len(ranked),
        seed=seed,
    )
