from __future__ import annotations

import json
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import pytest

from storefront.auth.models import User
from storefront.auth.repository import (
    DuplicateEmailError,
    UserRepository,
    UserStoreCorruptedError,
)


def _user(user_id: str = "u1", email: str = "a@x.com") -> User:
    return User(user_id=user_id, name="A", email=email, password_hash="hash")


def test_insert_and_lookup_by_email_is_case_insensitive(tmp_path: Path) -> None:
    repo = UserRepository(runtime_dir=tmp_path)
    repo.insert_user(_user(email="User@Test.Local"))

    by_email = repo.get_user_by_email("  user@test.local ")
    by_id = repo.get_user_by_id("u1")

    assert by_email is not None
    assert by_email.email == "user@test.local"
    assert by_id is not None
    assert by_id.user_id == "u1"
    assert repo.get_user_by_id("missing") is None


def test_insert_duplicate_email_raises(tmp_path: Path) -> None:
    repo = UserRepository(runtime_dir=tmp_path)
    repo.insert_user(_user("u1", "dupe@x.com"))

    with pytest.raises(DuplicateEmailError):
        repo.insert_user(_user("u2", "DUPE@x.com"))

    rows = json.loads((tmp_path / "store" / "users.json").read_text(encoding="utf-8"))
    assert len(rows) == 1


def test_concurrent_inserts_with_same_email_admit_exactly_one(tmp_path: Path) -> None:
    repo = UserRepository(runtime_dir=tmp_path)

    def attempt(index: int) -> bool:
        try:
            repo.insert_user(_user(f"u{index}", "race@x.com"))
        except DuplicateEmailError:
            return False
        return True

    with ThreadPoolExecutor(max_workers=8) as pool:
        outcomes = list(pool.map(attempt, range(8)))

    assert outcomes.count(True) == 1


def test_update_user_overwrites_fields_but_not_id(tmp_path: Path) -> None:
    repo = UserRepository(runtime_dir=tmp_path)
    repo.insert_user(_user())

    updated = repo.update_user("u1", {"city": "Springfield", "user_id": "hijack"})

    assert updated is not None
    assert updated.user_id == "u1"
    assert updated.city == "Springfield"
    assert repo.update_user("missing", {"city": "X"}) is None


def test_delete_user(tmp_path: Path) -> None:
    repo = UserRepository(runtime_dir=tmp_path)
    repo.insert_user(_user())

    assert repo.delete_user("u1") is True
    assert repo.delete_user("u1") is False
    assert repo.get_user_by_id("u1") is None


def test_set_and_clear_refresh_token(tmp_path: Path) -> None:
    repo = UserRepository(runtime_dir=tmp_path)
    repo.insert_user(_user())

    assert repo.set_refresh_token("u1", "digest-1") is True
    assert repo.get_user_by_id("u1").refresh_token_hash == "digest-1"  # type: ignore[union-attr]
    assert repo.set_refresh_token("u1", None) is True
    assert repo.get_user_by_id("u1").refresh_token_hash is None  # type: ignore[union-attr]
    assert repo.set_refresh_token("missing", "x") is False


def test_swap_refresh_token_is_compare_and_swap(tmp_path: Path) -> None:
    repo = UserRepository(runtime_dir=tmp_path)
    repo.insert_user(_user())
    repo.set_refresh_token("u1", "old")

    assert repo.swap_refresh_token("u1", "stale", "new") is False
    assert repo.swap_refresh_token("u1", "old", "new") is True
    assert repo.swap_refresh_token("u1", "old", "newer") is False
    assert repo.get_user_by_id("u1").refresh_token_hash == "new"  # type: ignore[union-attr]


def test_concurrent_swaps_with_same_token_have_single_winner(tmp_path: Path) -> None:
    repo = UserRepository(runtime_dir=tmp_path)
    repo.insert_user(_user())
    repo.set_refresh_token("u1", "old")

    with ThreadPoolExecutor(max_workers=8) as pool:
        outcomes = list(
            pool.map(lambda i: repo.swap_refresh_token("u1", "old", f"new-{i}"), range(8))
        )

    winner = outcomes.index(True)
    assert outcomes.count(True) == 1
    assert repo.get_user_by_id("u1").refresh_token_hash == f"new-{winner}"  # type: ignore[union-attr]


def test_lists_keep_order_and_reject_duplicates(tmp_path: Path) -> None:
    repo = UserRepository(runtime_dir=tmp_path)
    repo.insert_user(_user())

    repo.add_to_list("u1", "cart", "p1")
    repo.add_to_list("u1", "cart", "p2")
    items = repo.add_to_list("u1", "cart", "p1")
    after_remove = repo.remove_from_list("u1", "cart", "p1")
    noop_remove = repo.remove_from_list("u1", "cart", "absent")

    assert items == ["p1", "p2"]
    assert after_remove == ["p2"]
    assert noop_remove == ["p2"]
    assert repo.get_list("u1", "wishlist") == []
    assert repo.add_to_list("missing", "cart", "p1") is None


def test_unknown_list_name_is_rejected(tmp_path: Path) -> None:
    repo = UserRepository(runtime_dir=tmp_path)

    with pytest.raises(ValueError):
        repo.add_to_list("u1", "orders", "p1")


def test_corrupted_store_file_blocks_writes(tmp_path: Path) -> None:
    repo = UserRepository(runtime_dir=tmp_path)
    repo.insert_user(_user("u1", "a@x.com"))
    users_file = tmp_path / "store" / "users.json"
    users_file.write_text('[{"user_id": "u1", "na', encoding="utf-8")

    assert repo.get_user_by_email("a@x.com") is None
    with pytest.raises(UserStoreCorruptedError):
        repo.insert_user(_user("u2", "b@x.com"))
    with pytest.raises(UserStoreCorruptedError):
        repo.set_refresh_token("u1", "digest")
    with pytest.raises(UserStoreCorruptedError):
        repo.add_to_list("u1", "cart", "p1")
    with pytest.raises(UserStoreCorruptedError):
        repo.delete_user("u1")

    assert users_file.read_text(encoding="utf-8") == '[{"user_id": "u1", "na'
