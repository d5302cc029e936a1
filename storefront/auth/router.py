"""Authentication API router."""

from __future__ import annotations

from fastapi import APIRouter, Cookie, Request, Response

from storefront.api.contracts import (
    ApiErrorResponse,
    LoginResponse,
    MessageResponse,
    RefreshResponse,
    UserProfileResponse,
)
from storefront.auth.middleware import current_user_id
from storefront.auth.models import ContactDetails, LoginRequest, SignupRequest
from storefront.auth.service import AuthService
from storefront.core.config import AuthConfig

REFRESH_COOKIE = "refreshToken"
REFRESH_COOKIE_PATH = "/auth"


def _set_refresh_cookie(response: Response, token: str, config: AuthConfig) -> None:
    response.set_cookie(
        key=REFRESH_COOKIE,
        value=token,
        max_age=config.refresh_token_ttl_seconds,
        path=REFRESH_COOKIE_PATH,
        httponly=True,
        secure=config.cookie_secure,
        samesite=config.cookie_samesite,
    )


def create_auth_router(service: AuthService, config: AuthConfig) -> APIRouter:
    """Build authentication router with signup/login/refresh/logout/profile."""
    router = APIRouter(prefix="/auth", tags=["auth"])

    @router.post(
        "/signup",
        status_code=201,
        response_model=MessageResponse,
        responses={400: {"model": ApiErrorResponse}},
    )
    def signup(req: SignupRequest) -> MessageResponse:
        """Register a new account."""
        service.signup(req.name, req.email, req.password)
        return MessageResponse(message="User registered successfully")

    @router.post(
        "/login",
        response_model=LoginResponse,
        responses={401: {"model": ApiErrorResponse}},
    )
    def login(req: LoginRequest, response: Response) -> LoginResponse:
        """Authenticate and return an access token; refresh token goes in a cookie."""
        result = service.login(req.email, req.password)
        _set_refresh_cookie(response, result.tokens.refresh_token, config)
        return LoginResponse(
            access_token=result.tokens.access_token,
            user=UserProfileResponse(**result.user.public_profile()),
        )

    @router.post(
        "/refresh",
        response_model=RefreshResponse,
        responses={403: {"model": ApiErrorResponse}},
    )
    def refresh(
        response: Response,
        refresh_token: str | None = Cookie(default=None, alias=REFRESH_COOKIE),
    ) -> RefreshResponse:
        """Rotate the refresh cookie and mint a new access token."""
        rotated = service.refresh(refresh_token)
        _set_refresh_cookie(response, rotated.refresh_token, config)
        return RefreshResponse(access_token=rotated.access_token)

    @router.post(
        "/logout",
        response_model=MessageResponse,
        responses={401: {"model": ApiErrorResponse}},
    )
    def logout(request: Request, response: Response) -> MessageResponse:
        """Revoke the stored refresh token and clear the cookie."""
        service.logout(current_user_id(request))
        response.delete_cookie(
            key=REFRESH_COOKIE,
            path=REFRESH_COOKIE_PATH,
            httponly=True,
            secure=config.cookie_secure,
            samesite=config.cookie_samesite,
        )
        return MessageResponse(message="Logged out successfully")

    @router.get(
        "/user",
        response_model=UserProfileResponse,
        responses={401: {"model": ApiErrorResponse}, 404: {"model": ApiErrorResponse}},
    )
    def get_user(request: Request) -> UserProfileResponse:
        """Return the profile of the authenticated user."""
        user = service.get_profile(current_user_id(request))
        return UserProfileResponse(**user.public_profile())

    @router.post(
        "/updateContact",
        response_model=MessageResponse,
        responses={
            400: {"model": ApiErrorResponse},
            401: {"model": ApiErrorResponse},
            404: {"model": ApiErrorResponse},
        },
    )
    def update_contact(req: ContactDetails, request: Request) -> MessageResponse:
        """Replace address, phone, pincode, city and state."""
        service.update_contact(current_user_id(request), req)
        return MessageResponse(message="Contact updated successfully")

    return router
