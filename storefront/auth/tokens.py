"""Access/refresh token issuance, verification and rotation.

Access tokens are verified from their signature and expiry alone and are
never looked up in the store, so they stay valid until they expire even
after logout. Refresh tokens are additionally compared with the single
digest stored on the user record, which is what makes them revocable:
a correctly signed refresh token is rejected as ``REVOKED`` once the
stored digest has moved on (rotation) or been cleared (logout).
"""

from __future__ import annotations

import hmac
import time
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

from storefront.auth.models import TokenPair
from storefront.core.config import AuthConfig
from storefront.core.security import (
    TokenError,
    build_signed_token,
    decode_signed_token,
    token_digest,
)

ACCESS = "access"
REFRESH = "refresh"


class TokenStatus(Enum):
    """Outcome of a token check."""

    OK = "ok"
    INVALID = "invalid"
    REVOKED = "revoked"


@dataclass(frozen=True)
class TokenCheck:
    """Tagged verification result; ``user_id`` is set only when status is OK."""

    status: TokenStatus
    user_id: str = ""
    reason: str = ""

    @property
    def ok(self) -> bool:
        return self.status is TokenStatus.OK

    @classmethod
    def invalid(cls, reason: str) -> "TokenCheck":
        return cls(status=TokenStatus.INVALID, reason=reason)


class TokenService:
    """Mint and verify signed tokens with an injectable clock."""

    def __init__(
        self, config: AuthConfig, clock: Callable[[], float] = time.time
    ) -> None:
        self._config = config
        self._clock = clock

    @property
    def refresh_ttl_seconds(self) -> int:
        return self._config.refresh_token_ttl_seconds

    def _now(self) -> int:
        return int(self._clock())

    def _build(self, user_id: str, token_type: str, ttl_seconds: int) -> str:
        now_ts = self._now()
        payload = {
            "iss": self._config.issuer,
            "sub": user_id,
            "type": token_type,
            "iat": now_ts,
            "exp": now_ts + ttl_seconds,
            "jti": uuid.uuid4().hex,
        }
        return build_signed_token(payload, self._config.secret_key)

    def issue(self, user_id: str) -> TokenPair:
        """Mint a fresh access/refresh pair for ``user_id``."""
        return TokenPair(
            access_token=self._build(
                user_id, ACCESS, self._config.access_token_ttl_seconds
            ),
            refresh_token=self._build(
                user_id, REFRESH, self._config.refresh_token_ttl_seconds
            ),
        )

    def rotate(self, user_id: str) -> TokenPair:
        """Mint the replacement pair used by a successful refresh.

        The caller must store the new refresh digest before answering,
        otherwise the presented token would remain usable.
        """
        return self.issue(user_id)

    def _check(self, token: str, expected_type: str) -> TokenCheck:
        try:
            payload: dict[str, Any] = decode_signed_token(
                token, self._config.secret_key, now=self._now()
            )
        except TokenError as exc:
            return TokenCheck.invalid(str(exc))

        if str(payload.get("iss") or "") != self._config.issuer:
            return TokenCheck.invalid("Invalid token issuer")
        if str(payload.get("type") or "") != expected_type:
            return TokenCheck.invalid("Invalid token type")
        user_id = str(payload.get("sub") or "")
        if not user_id:
            return TokenCheck.invalid("Token has no subject")
        return TokenCheck(status=TokenStatus.OK, user_id=user_id)

    def verify_access(self, token: str) -> TokenCheck:
        """Check signature, expiry and type of an access token."""
        return self._check(token, ACCESS)

    def peek_refresh_subject(self, token: str) -> TokenCheck:
        """Validate a refresh token cryptographically, without the store check."""
        return self._check(token, REFRESH)

    def verify_refresh(self, token: str, stored_digest: str | None) -> TokenCheck:
        """Check a refresh token and compare it with the stored digest."""
        check = self._check(token, REFRESH)
        if not check.ok:
            return check
        if not stored_digest or not hmac.compare_digest(
            self.hash_token(token), stored_digest
        ):
            return TokenCheck(
                status=TokenStatus.REVOKED,
                user_id=check.user_id,
                reason="Refresh token revoked",
            )
        return check

    @staticmethod
    def hash_token(token: str) -> str:
        return token_digest(token)
