from __future__ import annotations

from collections.abc import Iterable
from typing import Optional

from foryou_runtime.domain.common.ids import normalize_key
from foryou_runtime.domain.common.text import tokens_with_bigrams, unique_first

SIGNAL_TAG_LIMIT = 24
SIGNAL_TAG_STOPWORDS = frozenset(
    {
        "and",
        "for",
        "with",
        "the",
        "this",
        "that",
        "from",
        "women",
        "woman",
        "female",
        "men",
        "man",
        "male",
        "unisex",
    }
)


def derive_signal_tags(
    base_tags: Optional[Iterable[Optional[str]]] = None,
    handle: Optional[str] = None,
    vendor: Optional[str] = None,
    product_type: Optional[str] = None,
    title: Optional[str] = None,
    limit: int = SIGNAL_TAG_LIMIT,
) -> list[str]:
    """
    Expand raw merchandising tags and structured fields into signal tags.

    Each raw tag is kept verbatim (normalized) followed by its tokens and
    bigrams; vendor, product type, title and handle then contribute their
    tokens and bigrams. Output is deduplicated in first-seen order.
    """
    out: list[str] = []
    for tag in base_tags or ():
        normalized = normalize_key(tag)
        if not normalized:
            continue
        out.append(normalized)
        out.extend(tokens_with_bigrams(normalized, SIGNAL_TAG_STOPWORDS))
    for value in (vendor, product_type, title, handle):
        out.extend(tokens_with_bigrams(value, SIGNAL_TAG_STOPWORDS))
    return unique_first(out, limit)
