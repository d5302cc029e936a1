"""Shared API error types and helpers."""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from fastapi import HTTPException


class ApiErrorCode(StrEnum):
    """Machine-readable API error codes."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    AUTH_MISSING_TOKEN = "AUTH_MISSING_TOKEN"
    AUTH_INVALID_CREDENTIALS = "AUTH_INVALID_CREDENTIALS"
    AUTH_TOKEN_INVALID = "AUTH_TOKEN_INVALID"
    AUTH_REFRESH_MISSING = "AUTH_REFRESH_MISSING"
    AUTH_REFRESH_INVALID = "AUTH_REFRESH_INVALID"
    AUTH_EMAIL_CONFLICT = "AUTH_EMAIL_CONFLICT"
    USER_NOT_FOUND = "USER_NOT_FOUND"
    PRODUCT_NOT_FOUND = "PRODUCT_NOT_FOUND"
    IMAGE_UPLOAD_FAILED = "IMAGE_UPLOAD_FAILED"
    REQUEST_TOO_LARGE = "REQUEST_TOO_LARGE"
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"


class ApiError(HTTPException):
    """HTTP exception carrying stable API error envelope."""

    def __init__(
        self,
        *,
        status_code: int,
        error_code: ApiErrorCode,
        message: str,
        headers: dict[str, str] | None = None,
    ) -> None:
        super().__init__(
            status_code=status_code,
            detail={"error_code": str(error_code), "message": message},
            headers=headers,
        )

    @property
    def error_code(self) -> str:
        return str(self.detail["error_code"])


def unauthenticated(error_code: ApiErrorCode, message: str) -> ApiError:
    """401 with the bearer challenge header."""
    return ApiError(
        status_code=401,
        error_code=error_code,
        message=message,
        headers={"WWW-Authenticate": "Bearer"},
    )


def forbidden(error_code: ApiErrorCode, message: str) -> ApiError:
    return ApiError(status_code=403, error_code=error_code, message=message)


def not_found(error_code: ApiErrorCode, message: str) -> ApiError:
    return ApiError(status_code=404, error_code=error_code, message=message)


def validation_failed(message: str) -> ApiError:
    return ApiError(
        status_code=400, error_code=ApiErrorCode.VALIDATION_ERROR, message=message
    )


def to_error_payload(detail: Any, status_code: int) -> dict[str, str]:
    """Normalize HTTP exception detail into stable error payload."""
    if isinstance(detail, dict):
        error_code = str(detail.get("error_code") or f"HTTP_{status_code}")
        message = str(detail.get("message") or detail.get("detail") or "HTTP error")
        return {"error_code": error_code, "message": message}
    return {
        "error_code": f"HTTP_{status_code}",
        "message": str(detail or "HTTP error"),
    }
