from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ProductIntelligenceConfig:
    max_normalized_terms: int = 64
    max_attribute_tokens: int = 12
    max_image_tokens: int = 20
    # Classification thresholds
    keyword_hit_weight: float = 2.0
    plural_hit_weight: float = 1.6
    phrase_hit_weight: float = 2.6
    suppression_penalty: float = 0.8
    min_top_score: float = 2.0
    min_confidence: float = 0.34
    no_match_confidence: float = 0.15
    # Weighted term sources
    title_weight: float = 4.0
    product_type_weight: float = 3.5
    derived_tag_weight: float = 3.0
    content_weight: float = 2.2
    handle_weight: float = 2.0
    image_weight: float = 2.0
    vendor_weight: float = 0.8
    # Cache
    cache_size: int = 800
    debug_sample_limit: int = 5
