"""Repository for user records, refresh-token digests and shopping lists."""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Any, Callable

from pymongo import ReturnDocument
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from storefront.auth.models import User, normalize_email

LOGGER = logging.getLogger(__name__)

LIST_NAMES = frozenset({"cart", "wishlist"})


class DuplicateEmailError(Exception):
    """Raised when inserting a user whose email is already registered."""


class UserStoreCorruptedError(RuntimeError):
    """Raised when a write would replace an unreadable users file."""


def _check_list_name(list_name: str) -> None:
    if list_name not in LIST_NAMES:
        raise ValueError(f"Unknown list: {list_name}")


class UserRepository:
    """User storage with MongoDB primary and JSON file-store fallback."""

    def __init__(self, *, runtime_dir: Path, database: Database | None = None) -> None:
        self._lock = threading.Lock()
        self._users_file = runtime_dir / "store" / "users.json"
        self._users_file.parent.mkdir(parents=True, exist_ok=True)
        self._mongo_users = database["users"] if database is not None else None
        if self._mongo_users is not None:
            # signup relies on this index to reject concurrent duplicates
            self._mongo_users.create_index("email", unique=True)

    # -- file backend helpers --

    def _read_rows(self, *, for_write: bool = False) -> list[dict[str, Any]]:
        """Load all rows; writers refuse to proceed on an unreadable file."""
        if not self._users_file.exists():
            return []
        try:
            payload = json.loads(self._users_file.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            payload = None
        if isinstance(payload, list):
            return payload
        LOGGER.warning("user_store_unreadable", extra={"path": str(self._users_file)})
        if for_write:
            raise UserStoreCorruptedError(str(self._users_file))
        return []

    def _write_rows(self, rows: list[dict[str, Any]]) -> None:
        tmp_path = self._users_file.with_suffix(".tmp")
        tmp_path.write_text(json.dumps(rows, ensure_ascii=False, indent=2), encoding="utf-8")
        tmp_path.replace(self._users_file)

    def _mutate_row(
        self, user_id: str, mutate: Callable[[dict[str, Any]], bool]
    ) -> dict[str, Any] | None:
        """Apply ``mutate`` to one row under the lock; persist if it returns True."""
        with self._lock:
            rows = self._read_rows(for_write=True)
            for row in rows:
                if row.get("user_id") == user_id:
                    if mutate(row):
                        self._write_rows(rows)
                    return row
        return None

    # -- lookups --

    def get_user_by_email(self, email: str) -> User | None:
        key = normalize_email(email)
        if self._mongo_users is not None:
            doc = self._mongo_users.find_one({"email": key}, {"_id": 0})
            return User.model_validate(doc) if doc else None

        for row in self._read_rows():
            if normalize_email(str(row.get("email", ""))) == key:
                return User.model_validate(row)
        return None

    def get_user_by_id(self, user_id: str) -> User | None:
        if self._mongo_users is not None:
            doc = self._mongo_users.find_one({"user_id": user_id}, {"_id": 0})
            return User.model_validate(doc) if doc else None

        for row in self._read_rows():
            if row.get("user_id") == user_id:
                return User.model_validate(row)
        return None

    # -- writes --

    def insert_user(self, user: User) -> None:
        """Insert a new user; email uniqueness is enforced by the backend."""
        doc = user.model_dump()
        doc["email"] = normalize_email(user.email)
        if self._mongo_users is not None:
            try:
                # insert_one mutates its argument with _id
                self._mongo_users.insert_one(dict(doc))
            except DuplicateKeyError as exc:
                raise DuplicateEmailError(doc["email"]) from exc
            return

        with self._lock:
            rows = self._read_rows(for_write=True)
            if any(normalize_email(str(row.get("email", ""))) == doc["email"] for row in rows):
                raise DuplicateEmailError(doc["email"])
            rows.append(doc)
            self._write_rows(rows)

    def update_user(self, user_id: str, patch: dict[str, Any]) -> User | None:
        """Overwrite the given fields; returns the updated user or None if missing."""
        patch = {key: value for key, value in patch.items() if key != "user_id"}
        if self._mongo_users is not None:
            doc = self._mongo_users.find_one_and_update(
                {"user_id": user_id},
                {"$set": patch},
                projection={"_id": 0},
                return_document=ReturnDocument.AFTER,
            )
            return User.model_validate(doc) if doc else None

        def apply(row: dict[str, Any]) -> bool:
            row.update(patch)
            return True

        row = self._mutate_row(user_id, apply)
        return User.model_validate(row) if row is not None else None

    def delete_user(self, user_id: str) -> bool:
        if self._mongo_users is not None:
            return self._mongo_users.delete_one({"user_id": user_id}).deleted_count == 1

        with self._lock:
            rows = self._read_rows(for_write=True)
            remaining = [row for row in rows if row.get("user_id") != user_id]
            if len(remaining) == len(rows):
                return False
            self._write_rows(remaining)
            return True

    # -- refresh token digest --

    def set_refresh_token(self, user_id: str, digest: str | None) -> bool:
        """Unconditionally store (or clear with None) the refresh digest."""
        if self._mongo_users is not None:
            result = self._mongo_users.update_one(
                {"user_id": user_id}, {"$set": {"refresh_token_hash": digest}}
            )
            return result.matched_count == 1

        def apply(row: dict[str, Any]) -> bool:
            row["refresh_token_hash"] = digest
            return True

        return self._mutate_row(user_id, apply) is not None

    def swap_refresh_token(self, user_id: str, expected: str, new: str) -> bool:
        """Replace the stored digest only if it still equals ``expected``.

        Exactly one of several concurrent callers presenting the same
        ``expected`` value gets True.
        """
        if self._mongo_users is not None:
            result = self._mongo_users.update_one(
                {"user_id": user_id, "refresh_token_hash": expected},
                {"$set": {"refresh_token_hash": new}},
            )
            return result.modified_count == 1

        swapped = False

        def apply(row: dict[str, Any]) -> bool:
            nonlocal swapped
            if row.get("refresh_token_hash") != expected:
                return False
            row["refresh_token_hash"] = new
            swapped = True
            return True

        self._mutate_row(user_id, apply)
        return swapped

    # -- cart / wishlist --

    def get_list(self, user_id: str, list_name: str) -> list[str] | None:
        _check_list_name(list_name)
        user = self.get_user_by_id(user_id)
        return list(getattr(user, list_name)) if user is not None else None

    def add_to_list(self, user_id: str, list_name: str, product_id: str) -> list[str] | None:
        """Append ``product_id`` unless present; None when the user is missing."""
        _check_list_name(list_name)
        if self._mongo_users is not None:
            doc = self._mongo_users.find_one_and_update(
                {"user_id": user_id},
                {"$addToSet": {list_name: product_id}},
                projection={"_id": 0, list_name: 1},
                return_document=ReturnDocument.AFTER,
            )
            return list(doc.get(list_name) or []) if doc else None

        def apply(row: dict[str, Any]) -> bool:
            items = row.setdefault(list_name, [])
            if product_id in items:
                return False
            items.append(product_id)
            return True

        row = self._mutate_row(user_id, apply)
        return list(row.get(list_name) or []) if row is not None else None

    def remove_from_list(
        self, user_id: str, list_name: str, product_id: str
    ) -> list[str] | None:
        """Drop ``product_id`` if present; None when the user is missing."""
        _check_list_name(list_name)
        if self._mongo_users is not None:
            doc = self._mongo_users.find_one_and_update(
                {"user_id": user_id},
                {"$pull": {list_name: product_id}},
                projection={"_id": 0, list_name: 1},
                return_document=ReturnDocument.AFTER,
            )
            return list(doc.get(list_name) or []) if doc else None

        def apply(row: dict[str, Any]) -> bool:
            items = row.setdefault(list_name, [])
            if product_id not in items:
                return False
            items.remove(product_id)
            return True

        row = self._mutate_row(user_id, apply)
        return list(row.get(list_name) or []) if row is not None else None
