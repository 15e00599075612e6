from __future__ import annotations

# Primary categories
BOTTOMS_DENIM = "bottoms_denim"
BOTTOMS_PANTS = "bottoms_pants"
UNDERWEAR = "underwear"
TOPS_HOODIES = "tops_hoodies"
TOPS_SHIRTS = "tops_shirts"
OUTERWEAR = "outerwear"
SHOES = "shoes"
ACCESSORIES = "accessories"
UNKNOWN = "unknown"

PRIMARY_CATEGORIES = (
    BOTTOMS_DENIM,
    BOTTOMS_PANTS,
    UNDERWEAR,
    TOPS_HOODIES,
    TOPS_SHIRTS,
    OUTERWEAR,
    SHOES,
    ACCESSORIES,
    UNKNOWN,
)

# Keyword lists per category, in evaluation order
CATEGORY_KEYWORDS: dict[str, tuple[str, ...]] = {
    BOTTOMS_DENIM: ("jean", "jeans", "denim", "straight leg", "wide leg", "bootcut"),
    BOTTOMS_PANTS: ("pant", "pants", "trouser", "trousers", "cargo"),
    UNDERWEAR: ("boxer", "brief", "underwear"),
    TOPS_HOODIES: ("hoodie", "sweatshirt"),
    TOPS_SHIRTS: ("shirt", "tee", "t-shirt"),
    OUTERWEAR: ("jacket", "coat", "parka"),
    SHOES: ("sneaker", "boot", "loafer"),
    ACCESSORIES: ("belt", "cap", "hat", "bag"),
}

# Bias added to a category once it has any keyword hit
CATEGORY_BIAS: dict[str, float] = {
    BOTTOMS_DENIM: 1.4,
    UNDERWEAR: 1.2,
}

# Categories that suppress each other when both score
MUTUALLY_SUPPRESSED = frozenset({BOTTOMS_DENIM, UNDERWEAR})

# Closed attribute vocabularies
MATERIAL_VOCABULARY = ("cotton", "denim", "polyester", "fleece", "wool")
FIT_VOCABULARY = ("slim", "regular", "oversized", "relaxed", "straight", "skinny")
COLOR_VOCABULARY = ("black", "blue", "grey", "beige", "white", "brown")
STYLE_VOCABULARY = ("vintage", "washed", "distressed", "minimal", "graphic", "embroidered")
USE_CASE_VOCABULARY = ("summer", "winter", "casual", "formal", "gym", "streetwear")

GENERIC_TERMS = frozenset(
    {
        "men",
        "women",
        "male",
        "female",
        "unisex",
        "new",
        "newin",
        "new_in",
        "new-arrivals",
        "new_arrivals",
        "arrivals",
        "arrival",
        "all",
        "sale",
        "products",
        "product",
        "the",
        "with",
        "from",
        "this",
        "that",
        "and",
        "for",
    }
)

# Debug sink event kind
SAMPLE_KIND = "INTELLIGENCE_SAMPLE"
