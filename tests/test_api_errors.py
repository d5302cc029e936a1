from __future__ import annotations

from storefront.api.errors import (
    ApiError,
    ApiErrorCode,
    forbidden,
    to_error_payload,
    unauthenticated,
)


def test_to_error_payload_preserves_structured_detail() -> None:
    payload = to_error_payload(
        {"error_code": "AUTH_TOKEN_INVALID", "message": "Invalid"},
        401,
    )

    assert payload == {"error_code": "AUTH_TOKEN_INVALID", "message": "Invalid"}


def test_to_error_payload_normalizes_plain_string() -> None:
    payload = to_error_payload("boom", 500)

    assert payload == {"error_code": "HTTP_500", "message": "boom"}


def test_unauthenticated_carries_bearer_challenge() -> None:
    error = unauthenticated(ApiErrorCode.AUTH_TOKEN_INVALID, "Invalid token")

    assert isinstance(error, ApiError)
    assert error.status_code == 401
    assert error.headers == {"WWW-Authenticate": "Bearer"}
    assert error.error_code == "AUTH_TOKEN_INVALID"


def test_forbidden_has_no_challenge_header() -> None:
    error = forbidden(ApiErrorCode.AUTH_REFRESH_INVALID, "Invalid refresh token")

    assert error.status_code == 403
    assert error.headers is None
