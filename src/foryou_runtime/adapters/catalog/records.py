"""Pydantic models for raw storefront catalog records."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Iterable, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from foryou_runtime.application.errors import CatalogRecordError
from foryou_runtime.domain.catalog.model import ProductCandidate, ProductImage

logger = logging.getLogger(__name__)


def _unwrap_connection(value: Any) -> Any:
    """Accept a plain list, ``{"nodes": [...]}`` or ``{"edges": [{"node": ...}]}``."""
    if value is None:
        return []
    if isinstance(value, dict):
        if "nodes" in value:
            return value.get("nodes") or []
        if "edges" in value:
            return [edge.get("node") for edge in value.get("edges") or [] if isinstance(edge, dict)]
        return []
    return value


class ImageRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    url: Optional[str] = None
    alt_text: Optional[str] = Field(default=None, alias="altText")

    def to_image(self) -> ProductImage:
        return ProductImage(url=self.url or None, alt_text=self.alt_text or None)


class CatalogProductRecord(BaseModel):
    """One product as returned by the storefront API (camelCase) or written by hand (snake_case)."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: Optional[str] = None
    handle: str
    title: Optional[str] = None
    vendor: Optional[str] = None
    product_type: Optional[str] = Field(default=None, alias="productType")
    tags: list[str] = Field(default_factory=list)
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    available_for_sale: Optional[bool] = Field(default=None, alias="availableForSale")
    description: Optional[str] = None
    description_html: Optional[str] = Field(default=None, alias="descriptionHtml")
    featured_image: Optional[ImageRecord] = Field(default=None, alias="featuredImage")
    images: list[ImageRecord] = Field(default_factory=list)

    @field_validator("handle")
    @classmethod
    def _handle_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("handle must not be blank")
        return value

    @field_validator("tags", mode="before")
    @classmethod
    def _split_tags(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, str):
            return [part.strip() for part in value.split(",") if part.strip()]
        if isinstance(value, (list, tuple)):
            return [str(tag) for tag in value if tag is not None and str(tag).strip()]
        return value

    @field_validator("images", mode="before")
    @classmethod
    def _unwrap_images(cls, value: Any) -> Any:
        return [node for node in _unwrap_connection(value) if node is not None]

    @field_validator("created_at", mode="before")
    @classmethod
    def _blank_created_at(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("created_at")
    @classmethod
    def _assume_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    def to_candidate(self) -> ProductCandidate:
        return ProductCandidate.new(
            handle=self.handle,
            title=self.title or "",
            id=self.id or None,
            vendor=self.vendor or "",
            product_type=self.product_type or "",
            tags=self.tags,
            created_at=self.created_at,
            available_for_sale=self.available_for_sale is not False,
            description=self.description or "",
            description_html=self.description_html or "",
            featured_image=self.featured_image.to_image() if self.featured_image else None,
            images=[image.to_image() for image in self.images],
        )


def parse_catalog_record(raw: Any) -> ProductCandidate:
    """Validate one raw record and convert it; raises ``CatalogRecordError`` when it is unusable."""
    record_id = None
    if isinstance(raw, dict):
        record_id = raw.get("handle") or raw.get("id")
    try:
        record = CatalogProductRecord.model_validate(raw)
    except ValidationError as e:
        errors = [f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()]
        raise CatalogRecordError(
            f"Invalid catalog record {record_id!r}: {'; '.join(errors)}",
            record_id=str(record_id) if record_id is not None else None,
            errors=errors,
        ) from e
    return record.to_candidate()


def parse_catalog_records(raw_records: Iterable[Any]) -> list[ProductCandidate]:
    """Convert every usable record; invalid ones are logged and skipped."""
    candidates: list[ProductCandidate] = []
    skipped = 0
    for raw in _unwrap_connection(raw_records) if isinstance(raw_records, dict) else raw_records:
        try:
            candidates.append(parse_catalog_record(raw))
        except CatalogRecordError as e:
            skipped += 1
            logger.warning(str(e))
    if skipped:
        logger.info(f"Skipped {skipped} invalid catalog records, kept {len(candidates)}")
    return candidates
