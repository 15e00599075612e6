from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from foryou_runtime.adapters.catalog.in_memory_catalog import InMemoryCatalogSource
from foryou_runtime.adapters.catalog.records import parse_catalog_records
from foryou_runtime.application.errors import CatalogRecordError

logger = logging.getLogger(__name__)


def _extract_records(data: Any) -> Any:
    """Find the product list inside a storefront-style response or a bare array."""
    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        if isinstance(data.get("data"), dict):
            data = data["data"]
        products = data.get("products")
        if isinstance(products, (list, dict)):
            return products
    raise CatalogRecordError("Catalog file does not contain a product list")


class JsonFileCatalogSource(InMemoryCatalogSource):
    """Catalog loaded once from a JSON export."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise CatalogRecordError(f"Invalid JSON in {self.path}: {e}") from e
        candidates = parse_catalog_records(_extract_records(data))
        logger.info(f"Loaded {len(candidates)} catalog products from {self.path}")
        super().__init__(candidates)
