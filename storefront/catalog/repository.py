"""Repository for catalog products."""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Any

from pymongo import ASCENDING
from pymongo.database import Database

from storefront.catalog.models import Product

LOGGER = logging.getLogger(__name__)


class ProductStoreCorruptedError(RuntimeError):
    """Raised when a write would replace an unreadable products file."""


class ProductRepository:
    """Product storage with MongoDB primary and JSON file-store fallback."""

    def __init__(self, *, runtime_dir: Path, database: Database | None = None) -> None:
        self._lock = threading.Lock()
        self._products_file = runtime_dir / "store" / "products.json"
        self._products_file.parent.mkdir(parents=True, exist_ok=True)
        self._mongo_products = database["products"] if database is not None else None

    def _read_rows(self, *, for_write: bool = False) -> list[dict[str, Any]]:
        if not self._products_file.exists():
            return []
        try:
            payload = json.loads(self._products_file.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            payload = None
        if isinstance(payload, list):
            return payload
        LOGGER.warning("product_store_unreadable", extra={"path": str(self._products_file)})
        if for_write:
            raise ProductStoreCorruptedError(str(self._products_file))
        return []

    def list_products(self) -> list[Product]:
        """All products in insertion order."""
        if self._mongo_products is not None:
            cursor = self._mongo_products.find({}, {"_id": 0}).sort("_id", ASCENDING)
            return [Product.model_validate(doc) for doc in cursor]
        return [Product.model_validate(row) for row in self._read_rows()]

    def get_product(self, product_id: str) -> Product | None:
        if self._mongo_products is not None:
            doc = self._mongo_products.find_one({"product_id": product_id}, {"_id": 0})
            return Product.model_validate(doc) if doc else None

        for row in self._read_rows():
            if row.get("product_id") == product_id:
                return Product.model_validate(row)
        return None

    def insert_product(self, product: Product) -> None:
        doc = product.model_dump()
        if self._mongo_products is not None:
            self._mongo_products.insert_one(dict(doc))
            return

        with self._lock:
            rows = self._read_rows(for_write=True)
            rows.append(doc)
            tmp_path = self._products_file.with_suffix(".tmp")
            tmp_path.write_text(json.dumps(rows, ensure_ascii=False, indent=2), encoding="utf-8")
            tmp_path.replace(self._products_file)
