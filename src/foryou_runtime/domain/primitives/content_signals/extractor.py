from __future__ import annotations

import re
from collections.abc import Iterable
from typing import Optional

from foryou_runtime.domain.common.ids import normalize_key
from foryou_runtime.domain.common.text import tokenize, tokens_with_bigrams, unique_first
from foryou_runtime.domain.primitives.content_signals.config import ContentSignalConfig

_SCRIPT_BLOCK = re.compile(r"<script[\s\S]*?</script>", re.IGNORECASE)
_STYLE_BLOCK = re.compile(r"<style[\s\S]*?</style>", re.IGNORECASE)
_TAG = re.compile(r"<[^>]+>")
_WHITESPACE = re.compile(r"\s+")
_FILE_EXTENSION = re.compile(r"\.[a-z0-9]{2,5}$", re.IGNORECASE)

_IMG_ATTRIBUTE_PATTERNS = {
    attribute: re.compile(
        rf"""<img\b[^>]*\b{attribute}\s*=\s*(?:"([^"]*)"|'([^']*)'|([^\s>]+))""",
        re.IGNORECASE,
    )
    for attribute in ("alt", "src")
}

DEFAULT_CONFIG = ContentSignalConfig()


def strip_html_to_text(html: str) -> str:
    without_blocks = _STYLE_BLOCK.sub(" ", _SCRIPT_BLOCK.sub(" ", html))
    without_tags = _TAG.sub(" ", without_blocks)
    return _WHITESPACE.sub(" ", without_tags).strip()


def extract_img_attributes(html: str, attribute: str) -> list[str]:
    """Return the normalized values of ``attribute`` on every ``<img>`` tag."""
    pattern = _IMG_ATTRIBUTE_PATTERNS[attribute]
    out: list[str] = []
    for match in pattern.finditer(html):
        raw = next((group for group in match.groups() if group is not None), "")
        value = normalize_key(raw)
        if value:
            out.append(value)
    return out


def image_src_terms(src: str, stopwords: frozenset[str]) -> list[str]:
    """Tokens from an image filename: query dropped, extension stripped."""
    last = normalize_key(src.split("?")[0].split("/")[-1])
    if not last:
        return []
    return tokenize(_FILE_EXTENSION.sub("", last), stopwords)


def extract_content_signals(
    description_html: Optional[str] = None,
    description: Optional[str] = None,
    image_alt_texts: Optional[Iterable[Optional[str]]] = None,
    handle: Optional[str] = None,
    title: Optional[str] = None,
    vendor: Optional[str] = None,
    product_type: Optional[str] = None,
    config: ContentSignalConfig = DEFAULT_CONFIG,
) -> list[str]:
    """
    Turn product text and markup into a bounded list of normalized terms.

    Sources are consumed in priority order (image alt, image src, stripped
    description markup, plain description, handle, title, vendor, product
    type, extra alt texts) and the result is deduplicated preserving first
    occurrence, then truncated to ``config.max_signal_terms``.

    Never raises; missing inputs contribute nothing.
    """
    stopwords = config.stopwords
    terms: list[str] = []

    def push_tokens(value: object) -> None:
        terms.extend(tokens_with_bigrams(value, stopwords))

    html = normalize_key(description_html)[: config.max_html_chars]
    if html:
        for alt in extract_img_attributes(html, "alt"):
            push_tokens(alt)
        for src in extract_img_attributes(html, "src"):
            terms.extend(image_src_terms(src, stopwords))
        push_tokens(strip_html_to_text(html)[: config.max_text_chars])

    push_tokens(description)
    push_tokens(handle)
    push_tokens(title)
    push_tokens(vendor)
    push_tokens(product_type)
    for alt in image_alt_texts or ():
        push_tokens(alt)

    return unique_first(terms, config.max_signal_terms)
