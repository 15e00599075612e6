from __future__ import annotations

from collections.abc import Iterable

from foryou_runtime.domain.catalog.signals import SIGNAL_TAG_STOPWORDS
from foryou_runtime.domain.common.text import tokenize
from foryou_runtime.domain.primitives.interest_profile import rules
from foryou_runtime.domain.primitives.interest_profile.model import EventSemantics

UNKNOWN_CATEGORY = "unknown"


def derive_event_semantics(
    tags: Iterable[str], product_type: str = "", handle: str = "", vendor: str = ""
) -> EventSemantics:
    """Coarse category plus material and fit tokens for an interaction event."""
    tokens: set[str] = set()
    for entry in (*tags, product_type, handle, vendor):
        tokens.update(tokenize(entry, SIGNAL_TAG_STOPWORDS))

    category = UNKNOWN_CATEGORY
    for candidate, keywords in rules.EVENT_CATEGORY_RULES:
        if any(keyword in tokens for keyword in keywords):
            category = candidate
            break

    return EventSemantics(
        category=category,
        materials=tuple(term for term in rules.EVENT_MATERIALS if term in tokens),
        fits=tuple(term for term in rules.EVENT_FITS if term in tokens),
    )
