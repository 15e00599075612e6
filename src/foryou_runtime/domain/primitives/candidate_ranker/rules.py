from __future__ import annotations

from foryou_runtime.domain.primitives.product_intelligence.rules import (
    ACCESSORIES,
    BOTTOMS_DENIM,
    BOTTOMS_PANTS,
    OUTERWEAR,
    SHOES,
    TOPS_HOODIES,
    TOPS_SHIRTS,
    UNDERWEAR,
    UNKNOWN,
)

# Category distances
DISTANCE_SAME = 0
DISTANCE_RELATED = 1
DISTANCE_UNKNOWN = 2
DISTANCE_UNRELATED = 3

RELATED_CATEGORIES: dict[str, tuple[str, ...]] = {
    BOTTOMS_DENIM: (BOTTOMS_PANTS, OUTERWEAR),
    BOTTOMS_PANTS: (BOTTOMS_DENIM, OUTERWEAR),
    TOPS_HOODIES: (TOPS_SHIRTS, OUTERWEAR),
    TOPS_SHIRTS: (TOPS_HOODIES, OUTERWEAR),
    OUTERWEAR: (TOPS_HOODIES, TOPS_SHIRTS, BOTTOMS_PANTS, BOTTOMS_DENIM),
    UNDERWEAR: (BOTTOMS_PANTS,),
    SHOES: (ACCESSORIES, BOTTOMS_PANTS, BOTTOMS_DENIM),
    ACCESSORIES: (SHOES, TOPS_SHIRTS, TOPS_HOODIES),
    UNKNOWN: (),
}

GENERIC_SEED_TERMS = frozenset(
    {
        "men",
        "women",
        "man",
        "woman",
        "new",
        "sale",
        "all",
        "arrivals",
        "arrival",
        "new-in",
        "new_arrivals",
    }
)

# Debug sink event kind
TOP_RANKED_KIND = "RANK_TOP"
