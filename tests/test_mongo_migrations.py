from __future__ import annotations

from typing import Any

from storefront.core.mongo_migrations import MIGRATIONS, apply_mongo_migrations


class _Collection:
    def __init__(self) -> None:
        self.indexes: list[tuple[Any, dict[str, Any]]] = []
        self.docs: list[dict[str, Any]] = []

    def create_index(self, keys: Any, **kwargs: Any) -> str:
        self.indexes.append((keys, kwargs))
        return str(keys)

    def find_one(self, query: dict[str, Any]) -> dict[str, Any] | None:
        return next(
            (doc for doc in self.docs if all(doc.get(k) == v for k, v in query.items())),
            None,
        )

    def insert_one(self, doc: dict[str, Any]) -> None:
        self.docs.append(doc)


class _Database(dict):
    def __missing__(self, name: str) -> _Collection:
        collection = _Collection()
        self[name] = collection
        return collection


def test_apply_mongo_migrations_is_noop_without_database() -> None:
    assert apply_mongo_migrations(None) == []


def test_apply_mongo_migrations_creates_unique_email_index_once() -> None:
    db = _Database()

    first = apply_mongo_migrations(db)  # type: ignore[arg-type]
    second = apply_mongo_migrations(db)  # type: ignore[arg-type]

    assert first == [migration_id for migration_id, _ in MIGRATIONS]
    assert second == []
    assert ("email", {"unique": True}) in db["users"].indexes
    assert len(db["schema_migrations"].docs) == len(MIGRATIONS)
