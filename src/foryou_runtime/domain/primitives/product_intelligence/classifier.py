from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from typing import Optional

from foryou_runtime.domain.catalog.model import ProductCandidate
from foryou_runtime.domain.catalog.signals import derive_signal_tags
from foryou_runtime.domain.common.ids import normalize_key
from foryou_runtime.domain.common.text import clamp01, tokenize, unique_first
from foryou_runtime.domain.primitives.content_signals import extract_content_signals
from foryou_runtime.domain.primitives.product_intelligence import rules
from foryou_runtime.domain.primitives.product_intelligence.config import (
    ProductIntelligenceConfig,
)
from foryou_runtime.domain.primitives.product_intelligence.model import (
    CategoryMatch,
    ProductIntelligence,
)

logger = logging.getLogger(__name__)

_FILENAME_SPLIT = re.compile(r"[_\-.]+")
_FILE_EXTENSION = re.compile(r"\.[a-z0-9]{2,5}$", re.IGNORECASE)
_DIGITS = re.compile(r"^\d+$")
_SPACES = re.compile(r"\s+")

DEFAULT_CONFIG = ProductIntelligenceConfig()


def image_filename_tokens(url: Optional[str]) -> list[str]:
    if not isinstance(url, str) or not url.strip():
        return []
    segments = [segment for segment in url.split("?")[0].split("/") if segment]
    if not segments:
        return []
    stem = _FILE_EXTENSION.sub("", segments[-1])
    out = []
    for part in _FILENAME_SPLIT.split(stem):
        token = part.strip().lower()
        if len(token) >= 3 and token not in rules.GENERIC_TERMS and not _DIGITS.match(token):
            out.append(token)
    return out


def _add_weighted(weights: dict[str, float], terms: Iterable[str], weight: float) -> None:
    for term in terms:
        key = normalize_key(term)
        if not key or key in rules.GENERIC_TERMS:
            continue
        weights[key] = weights.get(key, 0.0) + weight


def _pick_attribute_tokens(terms: tuple[str, ...], vocabulary: tuple[str, ...], limit: int) -> tuple[str, ...]:
    allowed = set(vocabulary)
    return tuple(unique_first((term for term in terms if term in allowed), limit))


def classify_category(
    terms: Iterable[str], config: ProductIntelligenceConfig = DEFAULT_CONFIG
) -> CategoryMatch:
    """
    Score every category's keyword list against the weighted terms.

    Single-word keywords hit on exact terms (or their singular form for a
    plural keyword); phrases hit against the space-joined term string.
    """
    term_list = list(terms)
    term_set = set(term_list)
    joined = f" {' '.join(term_list)} "
    scores: dict[str, float] = {}
    sub_keywords: dict[str, str] = {}

    for category, keywords in rules.CATEGORY_KEYWORDS.items():
        score = 0.0
        best_keyword = ""
        for keyword in keywords:
            normalized = normalize_key(keyword)
            hit = 0.0
            if " " in normalized:
                if f" {normalized} " in joined:
                    hit = config.phrase_hit_weight
            elif normalized in term_set:
                hit = config.keyword_hit_weight
            elif normalized.endswith("s") and normalized[:-1] in term_set:
                hit = config.plural_hit_weight
            if hit > 0:
                score += hit
                # A phrase hit outranks any earlier single-word hit
                if not best_keyword or hit > config.keyword_hit_weight:
                    best_keyword = normalized
        if score > 0:
            score += rules.CATEGORY_BIAS.get(category, 0.0)
            scores[category] = score
            if best_keyword:
                sub_keywords[category] = _SPACES.sub("_", best_keyword)

    if not scores:
        return CategoryMatch(primary_category=rules.UNKNOWN, confidence_score=config.no_match_confidence)

    ranked = sorted(scores.items(), key=lambda item: -item[1])
    top_category, top_score = ranked[0]
    second_score = ranked[1][1] if len(ranked) > 1 else 0.0

    if top_category in rules.MUTUALLY_SUPPRESSED and any(
        other in scores for other in rules.MUTUALLY_SUPPRESSED if other != top_category
    ):
        top_score -= config.suppression_penalty

    confidence = clamp01(top_score / (top_score + second_score + 1))
    if top_score < config.min_top_score or confidence < config.min_confidence:
        return CategoryMatch(primary_category=rules.UNKNOWN, confidence_score=confidence)

    return CategoryMatch(
        primary_category=top_category,
        confidence_score=confidence,
        sub_category=sub_keywords.get(top_category),
    )


def _build(candidate: ProductCandidate, config: ProductIntelligenceConfig) -> ProductIntelligence:
    generic = rules.GENERIC_TERMS
    title_tokens = tokenize(candidate.title, generic)
    handle_tokens = tokenize(candidate.handle, generic)
    vendor_tokens = tokenize(candidate.vendor, generic)
    product_type_tokens = tokenize(candidate.product_type, generic)
    derived_tags = derive_signal_tags(
        base_tags=candidate.tags,
        handle=candidate.handle,
        title=candidate.title,
        vendor=candidate.vendor,
        product_type=candidate.product_type,
    )
    images = candidate.all_images
    content_signals = extract_content_signals(
        description_html=candidate.description_html,
        description=candidate.description,
        image_alt_texts=[image.alt_text for image in images],
        handle=candidate.handle,
        title=candidate.title,
        vendor=candidate.vendor,
        product_type=candidate.product_type,
    )
    image_tokens = unique_first(
        (token for image in images for token in image_filename_tokens(image.url)),
        config.max_image_tokens,
    )

    weights: dict[str, float] = {}
    _add_weighted(weights, title_tokens, config.title_weight)
    _add_weighted(weights, product_type_tokens, config.product_type_weight)
    _add_weighted(weights, derived_tags, config.derived_tag_weight)
    _add_weighted(weights, content_signals, config.content_weight)
    _add_weighted(weights, handle_tokens, config.handle_weight)
    _add_weighted(weights, image_tokens, config.image_weight)
    _add_weighted(weights, vendor_tokens, config.vendor_weight)

    # sorted() is stable, so equal weights keep first-seen order
    normalized_terms = tuple(
        term
        for term, _ in sorted(weights.items(), key=lambda item: -item[1])
        if len(term) >= 3 and term not in generic
    )[: config.max_normalized_terms]

    category = classify_category(normalized_terms, config)
    limit = config.max_attribute_tokens

    richness = (
        (0.2 if normalize_key(candidate.product_type) else 0.0)
        + min(0.3, len(candidate.tags) * 0.05)
        + min(0.3, len(normalized_terms) / 80)
        + min(0.2, category.confidence_score * 0.2)
    )

    return ProductIntelligence(
        primary_category=category.primary_category,
        confidence_score=round(category.confidence_score, 4),
        sub_category=category.sub_category,
        style_tokens=_pick_attribute_tokens(normalized_terms, rules.STYLE_VOCABULARY, limit),
        material_tokens=_pick_attribute_tokens(normalized_terms, rules.MATERIAL_VOCABULARY, limit),
        fit_tokens=_pick_attribute_tokens(normalized_terms, rules.FIT_VOCABULARY, limit),
        color_tokens=_pick_attribute_tokens(normalized_terms, rules.COLOR_VOCABULARY, limit),
        use_case_tokens=_pick_attribute_tokens(normalized_terms, rules.USE_CASE_VOCABULARY, limit),
        normalized_terms=normalized_terms,
        quality_score=round(clamp01(richness), 4),
    )


def build_product_intelligence(
    candidate: ProductCandidate, config: ProductIntelligenceConfig = DEFAULT_CONFIG
) -> ProductIntelligence:
    """
    Classify a catalog product into a primary category with attribute tokens.

    Deterministic in the candidate's fields. Any failure while building
    degrades to an unknown classification instead of raising.
    """
    try:
        return _build(candidate, config)
    except Exception:
        logger.exception(f"Failed to classify product {getattr(candidate, 'handle', None)!r}")
        return ProductIntelligence.unknown()


def infer_primary_category(
    candidate: ProductCandidate, config: ProductIntelligenceConfig = DEFAULT_CONFIG
) -> str:
    return build_product_intelligence(candidate, config).primary_category
