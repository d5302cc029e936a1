"""Password hashing and compact HS256 token signing."""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import json
import os
from typing import Any

PASSWORD_ALGORITHM = "pbkdf2_sha256"
PASSWORD_ITERATIONS = 210_000
_SALT_BYTES = 16
_TOKEN_HEADER = {"alg": "HS256", "typ": "JWT"}


class TokenError(ValueError):
    """Base error for tokens that cannot be trusted."""


class MalformedTokenError(TokenError):
    """Token is not a three-part base64url structure with a JSON payload."""


class TokenSignatureError(TokenError):
    """Token signature does not match the signing key."""


class TokenExpiredError(TokenError):
    """Token ``exp`` claim lies in the past."""


def _b64url_encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def _b64url_decode(value: str) -> bytes:
    padding = "=" * (-len(value) % 4)
    try:
        return base64.urlsafe_b64decode((value + padding).encode("ascii"))
    except (binascii.Error, UnicodeEncodeError) as exc:
        raise MalformedTokenError("Malformed token") from exc


def _derive(password: str, salt: bytes, iterations: int) -> bytes:
    return hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations)


def hash_password(password: str) -> str:
    """Return ``algo$iterations$salt$digest`` for a plaintext password."""
    salt = os.urandom(_SALT_BYTES)
    digest = _derive(password, salt, PASSWORD_ITERATIONS)
    return "$".join(
        [
            PASSWORD_ALGORITHM,
            str(PASSWORD_ITERATIONS),
            _b64url_encode(salt),
            _b64url_encode(digest),
        ]
    )


def verify_password(password: str, stored_hash: str) -> bool:
    """Check a plaintext password against a stored hash in constant time."""
    try:
        algo, iterations_raw, salt_b64, digest_b64 = stored_hash.split("$", 3)
        iterations = int(iterations_raw)
        salt = _b64url_decode(salt_b64)
        expected = _b64url_decode(digest_b64)
    except (ValueError, AttributeError):
        return False
    if algo != PASSWORD_ALGORITHM or iterations <= 0:
        return False
    return hmac.compare_digest(_derive(password, salt, iterations), expected)


def _sign(signing_input: bytes, secret_key: str) -> bytes:
    return hmac.new(secret_key.encode("utf-8"), signing_input, hashlib.sha256).digest()


def build_signed_token(payload: dict[str, Any], secret_key: str) -> str:
    """Create a compact ``header.payload.signature`` token."""
    header_part = _b64url_encode(
        json.dumps(_TOKEN_HEADER, separators=(",", ":")).encode("utf-8")
    )
    payload_part = _b64url_encode(
        json.dumps(payload, separators=(",", ":"), sort_keys=True).encode("utf-8")
    )
    signing_input = f"{header_part}.{payload_part}".encode("ascii")
    return f"{header_part}.{payload_part}.{_b64url_encode(_sign(signing_input, secret_key))}"


def decode_signed_token(token: str, secret_key: str, *, now: int) -> dict[str, Any]:
    """Verify signature and expiry of a compact token and return its payload.

    Raises a :class:`TokenError` subclass describing the first failed check.
    ``now`` is passed in by the caller so that expiry can be evaluated
    against an injected clock.
    """
    parts = token.split(".") if isinstance(token, str) else []
    if len(parts) != 3 or not all(parts):
        raise MalformedTokenError("Malformed token")
    header_part, payload_part, signature_part = parts

    signing_input = f"{header_part}.{payload_part}".encode("ascii", errors="replace")
    if not hmac.compare_digest(
        _sign(signing_input, secret_key), _b64url_decode(signature_part)
    ):
        raise TokenSignatureError("Invalid token signature")

    try:
        header = json.loads(_b64url_decode(header_part).decode("utf-8"))
        payload = json.loads(_b64url_decode(payload_part).decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise MalformedTokenError("Invalid token payload") from exc
    if not isinstance(header, dict) or header.get("alg") != _TOKEN_HEADER["alg"]:
        raise MalformedTokenError("Unsupported token algorithm")
    if not isinstance(payload, dict):
        raise MalformedTokenError("Invalid token payload")

    try:
        exp = int(payload.get("exp") or 0)
    except (TypeError, ValueError) as exc:
        raise MalformedTokenError("Invalid token expiry") from exc
    if exp <= 0:
        raise MalformedTokenError("Token has no expiry")
    if exp <= now:
        raise TokenExpiredError("Token expired")

    return payload


def token_digest(token: str) -> str:
    """SHA-256 hex digest of a raw token, used for storage and comparison."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()
