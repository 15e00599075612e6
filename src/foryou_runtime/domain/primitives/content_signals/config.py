from __future__ import annotations

from dataclasses import dataclass, field

DEFAULT_STOPWORDS = frozenset(
    {
        "and",
        "for",
        "with",
        "the",
        "this",
        "that",
        "from",
        "your",
        "our",
        "you",
        "are",
        "was",
        "were",
        "women",
        "woman",
        "female",
        "men",
        "man",
        "male",
        "unisex",
        "product",
        "products",
    }
)


@dataclass(frozen=True)
class ContentSignalConfig:
    max_html_chars: int = 12000
    max_text_chars: int = 6000
    max_signal_terms: int = 28
    stopwords: frozenset[str] = field(default=DEFAULT_STOPWORDS)
