from __future__ import annotations

from foryou_runtime.domain.primitives.content_signals.config import (
    DEFAULT_STOPWORDS,
    ContentSignalConfig,
)
from foryou_runtime.domain.primitives.content_signals.extractor import (
    extract_content_signals,
    extract_img_attributes,
    strip_html_to_text,
)

__all__ = [
    "ContentSignalConfig",
    "DEFAULT_STOPWORDS",
    "extract_content_signals",
    "extract_img_attributes",
    "strip_html_to_text",
]
