from __future__ import annotations

import re
from collections.abc import Iterable

from foryou_runtime.domain.common.ids import normalize_key

_NON_ALNUM = re.compile(r"[^a-z0-9]+")
_DIGITS = re.compile(r"^\d+$")

MIN_TOKEN_LENGTH = 3


def tokenize(value: object, stopwords: frozenset[str] = frozenset()) -> list[str]:
    """
    Split normalized text on non-alphanumeric runs.

    Keeps tokens of at least three characters that are neither pure digits
    nor stopwords.
    """
    text = normalize_key(value)
    if not text:
        return []
    return [
        token
        for token in _NON_ALNUM.split(text)
        if len(token) >= MIN_TOKEN_LENGTH and token not in stopwords and not _DIGITS.match(token)
    ]


def bigrams(tokens: list[str]) -> list[str]:
    return [f"{tokens[i]}_{tokens[i + 1]}" for i in range(len(tokens) - 1)]


def tokens_with_bigrams(value: object, stopwords: frozenset[str] = frozenset()) -> list[str]:
    tokens = tokenize(value, stopwords)
    return tokens + bigrams(tokens)


def unique_first(items: Iterable[object], limit: int | None = None) -> list[str]:
    """Normalize, drop empties and duplicates, preserve first-seen order."""
    seen: set[str] = set()
    out: list[str] = []
    for item in items:
        key = normalize_key(item)
        if not key or key in seen:
            continue
        seen.add(key)
        out.append(key)
        if limit is not None and len(out) >= limit:
            break
    return out


def clamp01(value: float) -> float:
    return max(0.0, min(1.0, value))
