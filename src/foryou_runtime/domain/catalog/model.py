from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from foryou_runtime.domain.common.ids import normalize_key


@dataclass(frozen=True)
class ProductImage:
    url: Optional[str] = None
    alt_text: Optional[str] = None


@dataclass(frozen=True)
class ProductCandidate:
    """Read-only catalog record after the ingestion boundary has normalized it."""

    id: str
    handle: str
    title: str = ""
    vendor: str = ""
    product_type: str = ""
    tags: tuple[str, ...] = ()
    created_at: Optional[datetime] = None
    available_for_sale: bool = True
    description: str = ""
    description_html: str = ""
    featured_image: Optional[ProductImage] = None
    images: tuple[ProductImage, ...] = field(default_factory=tuple)

    @property
    def cache_key(self) -> str:
        return normalize_key(self.handle) or normalize_key(self.id)

    @property
    def all_images(self) -> tuple[ProductImage, ...]:
        if self.featured_image is None:
            return self.images
        return (self.featured_image, *self.images)

    @staticmethod
    def new(
        handle: str,
        title: str = "",
        id: Optional[str] = None,
        vendor: str = "",
        product_type: str = "",
        tags: Optional[list[str]] = None,
        created_at: Optional[datetime] = None,
        available_for_sale: bool = True,
        description: str = "",
        description_html: str = "",
        featured_image: Optional[ProductImage] = None,
        images: Optional[list[ProductImage]] = None,
    ) -> "ProductCandidate":
        return ProductCandidate(
            id=id or f"gid://shopify/Product/{handle}",
            handle=handle,
            title=title,
            vendor=vendor,
            product_type=product_type,
            tags=tuple(tags or ()),
            created_at=created_at,
            available_for_sale=available_for_sale,
            description=description,
            description_html=description_html,
            featured_image=featured_image,
            images=tuple(images or ()),
        )
