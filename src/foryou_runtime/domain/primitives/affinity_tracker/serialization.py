"""Persisted tracker state: current shape plus migration from older payloads."""

from __future__ import annotations

import logging
from typing import Any

from foryou_runtime.domain.common.coerce import coerce_count, coerce_float
from foryou_runtime.domain.common.ids import normalize_key
from foryou_runtime.domain.common.schema import AFFINITY_STATE_SCHEMA, validation_error
from foryou_runtime.domain.common.timeutils import coerce_epoch_ms
from foryou_runtime.domain.primitives.affinity_tracker import rules
from foryou_runtime.domain.primitives.affinity_tracker.model import ProductAffinity

logger = logging.getLogger(__name__)


def to_payload(products: dict[str, ProductAffinity], updated_at: int) -> dict:
    return {
        "schema_version": rules.SCHEMA_VERSION,
        "updated_at": updated_at,
        "products": {handle: affinity.as_dict() for handle, affinity in products.items()},
    }


def from_payload(raw: Any, now: int) -> dict[str, ProductAffinity]:
    """
    Rebuild tracked products from a stored payload.

    Conforming payloads are loaded as-is. Anything else (v1 payloads,
    hand-edited files, partial writes) goes through field-by-field
    migration where bad values fall back to zero counts and ``now``.
    """
    if not isinstance(raw, dict):
        return {}
    error = validation_error(raw, AFFINITY_STATE_SCHEMA)
    if error is None:
        return {
            handle: ProductAffinity(
                handle=handle,
                raw_score=float(record["raw_score"]),
                view_count=record["view_count"],
                add_to_cart_count=record["add_to_cart_count"],
                first_interaction_at=record["first_interaction_at"],
                last_interaction_at=record["last_interaction_at"],
            )
            for handle, record in raw["products"].items()
        }
    logger.info(f"Migrating tracker state: {error}")
    return migrate_products(raw.get("products"), now)


def migrate_products(products: Any, now: int) -> dict[str, ProductAffinity]:
    if not isinstance(products, dict):
        return {}
    out: dict[str, ProductAffinity] = {}
    for key, record in products.items():
        if not isinstance(record, dict):
            continue
        affinity = migrate_record(key, record, now)
        if affinity is None:
            continue
        existing = out.get(affinity.handle)
        out[affinity.handle] = affinity if existing is None else _merge(existing, affinity)
    return out


def migrate_record(key: Any, record: dict, now: int) -> ProductAffinity | None:
    handle = normalize_key(record.get("handle")) or normalize_key(key)
    if not handle:
        return None

    raw_score = coerce_float(record.get("raw_score", record.get(rules.LEGACY_SCORE_FIELD)))
    last = coerce_epoch_ms(record.get("last_interaction_at", record.get(rules.LEGACY_LAST_INTERACTION_FIELD)))
    if last is None or last <= 0:
        last = now
    first = coerce_epoch_ms(record.get("first_interaction_at", record.get(rules.LEGACY_FIRST_INTERACTION_FIELD)))
    if first is None or first <= 0 or first > last:
        first = last

    return ProductAffinity(
        handle=handle,
        raw_score=max(0.0, raw_score) if raw_score is not None else 0.0,
        view_count=coerce_count(record.get("view_count", record.get(rules.LEGACY_VIEW_COUNT_FIELD))),
        add_to_cart_count=coerce_count(
            record.get("add_to_cart_count", record.get(rules.LEGACY_ADD_TO_CART_COUNT_FIELD))
        ),
        first_interaction_at=first,
        last_interaction_at=last,
    )


def _merge(a: ProductAffinity, b: ProductAffinity) -> ProductAffinity:
    # Keys that only differed by case or whitespace in older payloads
    return ProductAffinity(
        handle=a.handle,
        raw_score=a.raw_score + b.raw_score,
        view_count=a.view_count + b.view_count,
        add_to_cart_count=a.add_to_cart_count + b.add_to_cart_count,
        first_interaction_at=min(a.first_interaction_at, b.first_interaction_at),
        last_interaction_at=max(a.last_interaction_at, b.last_interaction_at),
    )
