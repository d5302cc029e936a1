"""Application configuration loaded from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

_TRUTHY = {"1", "true", "yes", "on"}
_DEV_ENVIRONMENTS = {"dev", "development", "local", "test"}


@dataclass(frozen=True)
class AuthConfig:
    """Authentication-related configuration."""

    secret_key: str
    access_token_ttl_seconds: int
    refresh_token_ttl_seconds: int
    issuer: str
    cookie_secure: bool
    cookie_samesite: str = "strict"


@dataclass(frozen=True)
class StorageConfig:
    """Document store and runtime file locations."""

    mongo_uri: str
    mongo_db: str
    runtime_dir: Path


@dataclass(frozen=True)
class LoggingConfig:
    """Structured logging configuration."""

    level: str


@dataclass(frozen=True)
class SecurityConfig:
    """API perimeter security settings."""

    cors_allowed_origins: list[str]
    request_max_bytes: int
    upload_max_bytes: int


@dataclass(frozen=True)
class AppConfig:
    """Top-level application configuration."""

    auth: AuthConfig
    storage: StorageConfig
    logging: LoggingConfig
    security: SecurityConfig

    @staticmethod
    def from_env() -> "AppConfig":
        """Build app config from process environment."""
        app_env = os.getenv("APP_ENV", "production").strip().lower() or "production"
        secret_key = (
            os.getenv("AUTH_SECRET_KEY", "").strip() or "dev-insecure-secret-change-me"
        )
        access_ttl = int(os.getenv("AUTH_ACCESS_TOKEN_TTL_SECONDS", "3600"))
        refresh_ttl = int(os.getenv("AUTH_REFRESH_TOKEN_TTL_SECONDS", "604800"))
        issuer = os.getenv("AUTH_ISSUER", "storefront").strip() or "storefront"
        cookie_secure_raw = os.getenv("AUTH_COOKIE_SECURE", "").strip().lower()
        if cookie_secure_raw:
            cookie_secure = cookie_secure_raw in _TRUTHY
        else:
            cookie_secure = app_env not in _DEV_ENVIRONMENTS
        mongo_uri = os.getenv("MONGODB_URI", "").strip()
        mongo_db = os.getenv("MONGODB_DB", "storefront").strip() or "storefront"
        runtime_dir = Path(os.getenv("RUNTIME_DIR", "runtime").strip() or "runtime")
        log_level = os.getenv("LOG_LEVEL", "INFO").strip() or "INFO"
        cors_allowed_origins = [
            origin.strip()
            for origin in os.getenv(
                "CORS_ALLOWED_ORIGINS",
                "http://localhost:3000,http://127.0.0.1:3000",
            ).split(",")
            if origin.strip()
        ]
        request_max_bytes = int(os.getenv("REQUEST_MAX_BYTES", str(10 * 1024 * 1024)))
        upload_max_bytes = int(os.getenv("UPLOAD_MAX_BYTES", str(5 * 1024 * 1024)))

        return AppConfig(
            auth=AuthConfig(
                secret_key=secret_key,
                access_token_ttl_seconds=access_ttl,
                refresh_token_ttl_seconds=refresh_ttl,
                issuer=issuer,
                cookie_secure=cookie_secure,
            ),
            storage=StorageConfig(
                mongo_uri=mongo_uri,
                mongo_db=mongo_db,
                runtime_dir=runtime_dir,
            ),
            logging=LoggingConfig(level=log_level),
            security=SecurityConfig(
                cors_allowed_origins=cors_allowed_origins,
                request_max_bytes=request_max_bytes,
                upload_max_bytes=upload_max_bytes,
            ),
        )
