"""Versioned MongoDB index migrations for storefront collections."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable

from pymongo.database import Database

from storefront.core.logging import CORRELATION_ID_CTX

LOGGER = logging.getLogger(__name__)

MigrationFn = Callable[[Any], None]


def _migration_0001_user_indexes(db: Any) -> None:
    db["users"].create_index("user_id", unique=True)
    db["users"].create_index("email", unique=True)


def _migration_0002_product_indexes(db: Any) -> None:
    db["products"].create_index("product_id", unique=True)
    db["products"].create_index("category")


MIGRATIONS: list[tuple[str, MigrationFn]] = [
    ("0001_user_indexes", _migration_0001_user_indexes),
    ("0002_product_indexes", _migration_0002_product_indexes),
]


def apply_mongo_migrations(db: Database | None) -> list[str]:
    """Apply pending migrations and return the ids that ran this time."""
    if db is None:
        return []

    migration_collection = db["schema_migrations"]
    migration_collection.create_index("migration_id", unique=True)

    applied: list[str] = []
    for migration_id, migration_fn in MIGRATIONS:
        if migration_collection.find_one({"migration_id": migration_id}):
            continue
        migration_fn(db)
        migration_collection.insert_one(
            {
                "migration_id": migration_id,
                "applied_at": datetime.now(timezone.utc),
                "correlation_id": CORRELATION_ID_CTX.get(),
            }
        )
        LOGGER.info("mongo_migration_applied", extra={"reason": migration_id})
        applied.append(migration_id)
    return applied
