from __future__ import annotations

SCHEMA_VERSION = 2
DEFAULT_STORE_KEY = "foryou_profile_v2"

# Declared preference flag
GENDER_MALE = "male"
GENDER_FEMALE = "female"
GENDER_UNKNOWN = "unknown"
GENDERS = (GENDER_MALE, GENDER_FEMALE, GENDER_UNKNOWN)

# Event types
PRODUCT_OPEN = "product_open"
ADD_TO_CART = "add_to_cart"
ADD_TO_WISHLIST = "add_to_wishlist"
SEARCH_CLICK = "search_click"
VARIANT_SELECT = "variant_select"
PDP_SCROLL_75 = "pdp_scroll_75_percent"
PDP_SCROLL_100 = "pdp_scroll_100_percent"
TIME_ON_PRODUCT_8S = "time_on_product_>8s"

EVENT_TYPES = (
    PRODUCT_OPEN,
    ADD_TO_CART,
    ADD_TO_WISHLIST,
    SEARCH_CLICK,
    VARIANT_SELECT,
    PDP_SCROLL_75,
    PDP_SCROLL_100,
    TIME_ON_PRODUCT_8S,
)

# Score buckets
BY_PRODUCT_HANDLE = "by_product_handle"
BY_VENDOR = "by_vendor"
BY_PRODUCT_TYPE = "by_product_type"
BY_TAG = "by_tag"
BY_CATEGORY = "by_category"
BY_MATERIAL = "by_material"
BY_FIT = "by_fit"

BUCKETS = (
    BY_PRODUCT_HANDLE,
    BY_VENDOR,
    BY_PRODUCT_TYPE,
    BY_TAG,
    BY_CATEGORY,
    BY_MATERIAL,
    BY_FIT,
)

# Buckets that must fall below the cold start threshold
COLD_START_BUCKETS = (BY_PRODUCT_HANDLE, BY_VENDOR, BY_PRODUCT_TYPE)

# Compaction cap multiplier per bucket (applied to the current cap)
COMPACTION_RATIOS = {
    BY_PRODUCT_HANDLE: 1.0,
    BY_VENDOR: 1.0,
    BY_PRODUCT_TYPE: 1.0,
    BY_TAG: 0.6,
    BY_CATEGORY: 0.4,
    BY_MATERIAL: 0.4,
    BY_FIT: 0.35,
}

# Short keys used for the profile hash
HASH_KEYS = {
    BY_PRODUCT_HANDLE: "h",
    BY_VENDOR: "v",
    BY_PRODUCT_TYPE: "p",
    BY_TAG: "t",
    BY_CATEGORY: "c",
    BY_MATERIAL: "m",
    BY_FIT: "f",
}


def _weights(
    product_open: float,
    add_to_cart: float,
    add_to_wishlist: float,
    search_click: float,
    variant_select: float,
    pdp_scroll_75: float,
    pdp_scroll_100: float,
    time_on_product_8s: float,
) -> dict[str, float]:
    return {
        PRODUCT_OPEN: product_open,
        ADD_TO_CART: add_to_cart,
        ADD_TO_WISHLIST: add_to_wishlist,
        SEARCH_CLICK: search_click,
        VARIANT_SELECT: variant_select,
        PDP_SCROLL_75: pdp_scroll_75,
        PDP_SCROLL_100: pdp_scroll_100,
        TIME_ON_PRODUCT_8S: time_on_product_8s,
    }


# Per event type bump applied to each bucket
EVENT_WEIGHTS: dict[str, dict[str, float]] = {
    BY_PRODUCT_HANDLE: _weights(2.5, 4.5, 4.0, 2.0, 1.0, 3.1, 3.7, 3.3),
    BY_VENDOR: _weights(1.4, 2.4, 2.2, 1.0, 0.6, 0.9, 1.1, 1.0),
    BY_PRODUCT_TYPE: _weights(0.9, 1.8, 1.5, 0.8, 0.5, 0.6, 0.8, 0.75),
    BY_TAG: _weights(0.5, 1.1, 0.9, 0.5, 0.3, 0.35, 0.45, 0.4),
    BY_CATEGORY: _weights(1.25, 2.5, 2.1, 1.1, 0.8, 1.05, 1.25, 1.3),
    BY_MATERIAL: _weights(0.8, 1.8, 1.4, 0.7, 0.55, 0.65, 0.75, 0.85),
    BY_FIT: _weights(0.65, 1.45, 1.2, 0.55, 0.5, 0.5, 0.62, 0.72),
}

# Event semantics: first matching rule wins
EVENT_CATEGORY_RULES: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("bottoms_denim", ("jeans", "denim")),
    ("underwear", ("boxer", "brief", "underwear")),
    ("tops_hoodies", ("hoodie", "sweatshirt", "pullover")),
    ("tops_shirts", ("shirt", "tee", "blouse")),
    ("outerwear", ("jacket", "coat", "parka", "blazer")),
    ("bottoms_pants", ("pants", "trouser", "cargo", "shorts", "skirt")),
    ("shoes", ("shoe", "sneaker", "boot", "loafer")),
    ("accessories", ("hat", "cap", "belt", "bag", "beret", "socks")),
)
EVENT_MATERIALS = ("cotton", "denim", "polyester", "fleece", "wool")
EVENT_FITS = ("slim", "regular", "oversized", "relaxed", "straight", "skinny")

# Debug sink event kind
SUMMARY_KIND = "PROFILE_SIGNAL_SUMMARY"
