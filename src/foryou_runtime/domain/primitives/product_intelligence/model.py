from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from foryou_runtime.domain.primitives.product_intelligence import rules


@dataclass(frozen=True)
class CategoryMatch:
    primary_category: str
    confidence_score: float
    sub_category: Optional[str] = None


@dataclass(frozen=True)
class ProductIntelligence:
    primary_category: str
    confidence_score: float
    sub_category: Optional[str]
    style_tokens: tuple[str, ...]
    material_tokens: tuple[str, ...]
    fit_tokens: tuple[str, ...]
    color_tokens: tuple[str, ...]
    use_case_tokens: tuple[str, ...]
    normalized_terms: tuple[str, ...]
    quality_score: float

    @property
    def is_known(self) -> bool:
        return self.primary_category != rules.UNKNOWN

    @staticmethod
    def unknown() -> "ProductIntelligence":
        return ProductIntelligence(
            primary_category=rules.UNKNOWN,
            confidence_score=0.0,
            sub_category=None,
            style_tokens=(),
            material_tokens=(),
            fit_tokens=(),
            color_tokens=(),
            use_case_tokens=(),
            normalized_terms=(),
            quality_score=0.0,
        )

    def sample(self, handle: str, term_limit: int = 8) -> dict:
        return {
            "handle": handle,
            "primary_category": self.primary_category,
            "confidence_score": self.confidence_score,
            "material_tokens": list(self.material_tokens),
            "fit_tokens": list(self.fit_tokens),
            "style_tokens": list(self.style_tokens),
            "normalized_terms_sample": list(self.normalized_terms[:term_limit]),
            "quality_score": self.quality_score,
        }
