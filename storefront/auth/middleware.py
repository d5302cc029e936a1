"""HTTP middleware that rejects unauthenticated calls to protected routes."""

from __future__ import annotations

from typing import Callable

from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse

from storefront.api.errors import ApiErrorCode, to_error_payload, unauthenticated
from storefront.auth.service import AuthService

PROTECTED_PATHS = frozenset({"/auth/user", "/auth/updateContact", "/auth/logout"})
PROTECTED_PREFIXES = ("/cart", "/wishlist")


def extract_bearer_token(authorization: str | None) -> str:
    """Extract bearer token from an Authorization header value."""
    parts = (authorization or "").strip().split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return ""
    return parts[1].strip()


def is_protected(path: str) -> bool:
    if path in PROTECTED_PATHS:
        return True
    return any(
        path == prefix or path.startswith(prefix + "/") for prefix in PROTECTED_PREFIXES
    )


def current_user_id(request: Request) -> str:
    """User id stored by the middleware; 401 if the route was not guarded."""
    user_id = getattr(request.state, "user_id", "")
    if not user_id:
        raise unauthenticated(ApiErrorCode.AUTH_MISSING_TOKEN, "Missing bearer token")
    return user_id


def create_auth_middleware(service: AuthService) -> Callable:
    """Create middleware that validates access tokens on protected paths."""

    async def auth_middleware(request: Request, call_next: Callable):
        if request.method == "OPTIONS" or not is_protected(request.url.path):
            return await call_next(request)

        token = extract_bearer_token(request.headers.get("authorization"))
        try:
            request.state.user_id = service.authenticate(token)
        except HTTPException as exc:
            return JSONResponse(
                status_code=exc.status_code,
                content=to_error_payload(exc.detail, exc.status_code),
                headers=exc.headers,
            )
        return await call_next(request)

    return auth_middleware
