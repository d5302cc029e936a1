"""Authentication service for signup, login, refresh, logout and profiles."""

from __future__ import annotations

import logging
import uuid

from storefront.api.errors import (
    ApiError,
    ApiErrorCode,
    forbidden,
    not_found,
    unauthenticated,
)
from storefront.auth.models import (
    ContactDetails,
    LoginResult,
    TokenPair,
    User,
    normalize_email,
)
from storefront.auth.repository import DuplicateEmailError, UserRepository
from storefront.auth.tokens import TokenService
from storefront.core.security import hash_password, verify_password

LOGGER = logging.getLogger(__name__)

# Computed once so unknown-email logins cost the same PBKDF2 round as real ones.
_DUMMY_PASSWORD_HASH = hash_password(uuid.uuid4().hex)


class AuthService:
    """Orchestrates credential checks, token issuance and the user store."""

    def __init__(self, repo: UserRepository, tokens: TokenService) -> None:
        self._repo = repo
        self._tokens = tokens

    @property
    def tokens(self) -> TokenService:
        return self._tokens

    def signup(self, name: str, email: str, password: str) -> User:
        """Register a user; no tokens are issued until the first login."""
        normalized_email = normalize_email(email)
        conflict = ApiError(
            status_code=400,
            error_code=ApiErrorCode.AUTH_EMAIL_CONFLICT,
            message="Email already in use",
        )
        if self._repo.get_user_by_email(normalized_email) is not None:
            raise conflict

        user = User(
            user_id=uuid.uuid4().hex,
            name=name.strip(),
            email=normalized_email,
            password_hash=hash_password(password),
            refresh_token_hash=None,
        )
        try:
            self._repo.insert_user(user)
        except DuplicateEmailError as exc:
            # lost the race against a concurrent signup with the same email
            raise conflict from exc
        LOGGER.info("signup_completed", extra={"user_id": user.user_id})
        return user

    def login(self, email: str, password: str) -> LoginResult:
        """Verify credentials and start a new refresh session."""
        user = self._repo.get_user_by_email(email)
        if user is None:
            verify_password(password, _DUMMY_PASSWORD_HASH)
            LOGGER.warning("login_failed", extra={"reason": "unknown_email"})
            raise self._invalid_credentials()
        if not verify_password(password, user.password_hash):
            LOGGER.warning(
                "login_failed", extra={"user_id": user.user_id, "reason": "bad_password"}
            )
            raise self._invalid_credentials()

        tokens = self._tokens.issue(user.user_id)
        # Persist before responding: a client must never hold a refresh
        # token that is not the one on record.
        stored = self._repo.set_refresh_token(
            user.user_id, self._tokens.hash_token(tokens.refresh_token)
        )
        if not stored:
            raise ApiError(
                status_code=500,
                error_code=ApiErrorCode.INTERNAL_SERVER_ERROR,
                message="Error logging in",
            )
        LOGGER.info("login_succeeded", extra={"user_id": user.user_id})
        return LoginResult(tokens=tokens, user=user)

    def refresh(self, refresh_token: str | None) -> TokenPair:
        """Exchange the current refresh token for a rotated pair."""
        if not refresh_token:
            raise forbidden(ApiErrorCode.AUTH_REFRESH_MISSING, "Refresh token required")

        subject = self._tokens.peek_refresh_subject(refresh_token)
        if not subject.ok:
            LOGGER.warning("refresh_rejected", extra={"reason": subject.reason})
            raise forbidden(ApiErrorCode.AUTH_REFRESH_INVALID, "Token expired or invalid")

        user = self._repo.get_user_by_id(subject.user_id)
        stored_digest = user.refresh_token_hash if user is not None else None
        check = self._tokens.verify_refresh(refresh_token, stored_digest)
        if user is None or not check.ok:
            LOGGER.warning(
                "refresh_rejected",
                extra={"user_id": subject.user_id, "reason": check.reason or "unknown_user"},
            )
            raise forbidden(ApiErrorCode.AUTH_REFRESH_INVALID, "Invalid refresh token")

        rotated = self._tokens.rotate(user.user_id)
        swapped = self._repo.swap_refresh_token(
            user.user_id,
            expected=self._tokens.hash_token(refresh_token),
            new=self._tokens.hash_token(rotated.refresh_token),
        )
        if not swapped:
            # another request rotated this token first
            LOGGER.warning(
                "refresh_rejected", extra={"user_id": user.user_id, "reason": "lost_race"}
            )
            raise forbidden(ApiErrorCode.AUTH_REFRESH_INVALID, "Invalid refresh token")
        LOGGER.info("refresh_rotated", extra={"user_id": user.user_id})
        return rotated

    def logout(self, user_id: str) -> None:
        """Clear the stored refresh digest; calling it twice is harmless."""
        self._repo.set_refresh_token(user_id, None)
        LOGGER.info("logout", extra={"user_id": user_id})

    def authenticate(self, access_token: str | None) -> str:
        """Return the user id carried by a valid access token or raise 401."""
        if not access_token:
            raise unauthenticated(ApiErrorCode.AUTH_MISSING_TOKEN, "Missing bearer token")
        check = self._tokens.verify_access(access_token)
        if not check.ok:
            raise unauthenticated(ApiErrorCode.AUTH_TOKEN_INVALID, "Invalid token")
        return check.user_id

    def get_profile(self, user_id: str) -> User:
        user = self._repo.get_user_by_id(user_id)
        if user is None:
            raise not_found(ApiErrorCode.USER_NOT_FOUND, "User not found")
        return user

    def update_contact(self, user_id: str, contact: ContactDetails) -> User:
        """Overwrite all five contact fields of the user."""
        updated = self._repo.update_user(user_id, contact.model_dump())
        if updated is None:
            raise not_found(ApiErrorCode.USER_NOT_FOUND, "User not found")
        return updated

    @staticmethod
    def _invalid_credentials() -> ApiError:
        return unauthenticated(ApiErrorCode.AUTH_INVALID_CREDENTIALS, "Invalid credentials")
