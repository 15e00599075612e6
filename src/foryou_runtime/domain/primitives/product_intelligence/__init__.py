from __future__ import annotations

from foryou_runtime.domain.primitives.product_intelligence.cache import (
    ProductIntelligenceCache,
)
from foryou_runtime.domain.primitives.product_intelligence.classifier import (
    build_product_intelligence,
    classify_category,
    infer_primary_category,
)
from foryou_runtime.domain.primitives.product_intelligence.config import (
    ProductIntelligenceConfig,
)
from foryou_runtime.domain.primitives.product_intelligence.model import (
    CategoryMatch,
    ProductIntelligence,
)
from foryou_runtime.domain.primitives.product_intelligence import rules

__all__ = [
    "CategoryMatch",
    "ProductIntelligence",
    "ProductIntelligenceCache",
    "ProductIntelligenceConfig",
    "build_product_intelligence",
    "classify_category",
    "infer_primary_category",
    "rules",
]
