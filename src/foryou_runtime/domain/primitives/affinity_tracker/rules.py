from __future__ import annotations

SCHEMA_VERSION = 2
DEFAULT_STORE_KEY = "foryou_tracking_v2"

# Interaction kinds
INTERACTION_VIEW = "view"
INTERACTION_ADD_TO_CART = "add_to_cart"

# Field names accepted from v1 payloads
LEGACY_SCORE_FIELD = "score"
LEGACY_LAST_INTERACTION_FIELD = "lastInteractionAt"
LEGACY_FIRST_INTERACTION_FIELD = "firstInteractionAt"
LEGACY_VIEW_COUNT_FIELD = "viewCount"
LEGACY_ADD_TO_CART_COUNT_FIELD = "addToCartCount"
