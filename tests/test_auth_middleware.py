from __future__ import annotations

import pytest

from storefront.auth.middleware import extract_bearer_token, is_protected


@pytest.mark.parametrize(
    ("header", "expected"),
    [
        ("Bearer abc", "abc"),
        ("bearer   abc ", "abc"),
        ("Basic abc", ""),
        ("Bearer", ""),
        ("", ""),
        (None, ""),
    ],
)
def test_extract_bearer_token(header: str | None, expected: str) -> None:
    assert extract_bearer_token(header) == expected


@pytest.mark.parametrize(
    ("path", "expected"),
    [
        ("/auth/user", True),
        ("/auth/updateContact", True),
        ("/auth/logout", True),
        ("/cart", True),
        ("/cart/p1", True),
        ("/wishlist/p1", True),
        ("/auth/login", False),
        ("/auth/signup", False),
        ("/auth/refresh", False),
        ("/products", False),
        ("/cartography", False),
    ],
)
def test_is_protected(path: str, expected: bool) -> None:
    assert is_protected(path) is expected
