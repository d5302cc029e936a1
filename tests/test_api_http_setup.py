from __future__ import annotations

import asyncio
import inspect
import logging
from pathlib import Path
from typing import Any, Awaitable, Coroutine, cast

from fastapi import FastAPI, HTTPException
from starlette.exceptions import HTTPException as StarletteHTTPException
from fastapi.exceptions import RequestValidationError
from starlette.requests import Request
from starlette.responses import Response

from storefront.api.http_setup import register_exception_handlers, register_http_middleware
from storefront.core.config import (
    AppConfig,
    AuthConfig,
    LoggingConfig,
    SecurityConfig,
    StorageConfig,
)

LOGGER = logging.getLogger(__name__)


def _config() -> AppConfig:
    return AppConfig(
        auth=AuthConfig(
            secret_key="secret",
            access_token_ttl_seconds=3600,
            refresh_token_ttl_seconds=604800,
            issuer="test",
            cookie_secure=False,
        ),
        storage=StorageConfig(mongo_uri="", mongo_db="test", runtime_dir=Path("runtime")),
        logging=LoggingConfig(level="INFO"),
        security=SecurityConfig(
            cors_allowed_origins=["http://localhost:3000"],
            request_max_bytes=8,
            upload_max_bytes=16,
        ),
    )


def _request(path: str, method: str = "GET", headers: list[tuple[bytes, bytes]] | None = None) -> Request:
    scope: dict[str, Any] = {
        "type": "http",
        "asgi": {"version": "3.0"},
        "http_version": "1.1",
        "method": method,
        "scheme": "http",
        "path": path,
        "raw_path": path.encode("utf-8"),
        "query_string": b"",
        "root_path": "",
        "headers": headers or [],
        "client": ("127.0.0.1", 1234),
        "server": ("testserver", 80),
    }

    async def receive() -> dict[str, Any]:
        return {"type": "http.request", "body": b"", "more_body": False}

    return Request(scope, receive)


def _app() -> FastAPI:
    app = FastAPI()
    register_http_middleware(app, config=_config(), logger=LOGGER)
    register_exception_handlers(app, logger=LOGGER)
    return app


def _dispatch_by_name(app: FastAPI, name: str):
    for middleware in app.user_middleware:
        dispatch = middleware.kwargs.get("dispatch")
        if callable(dispatch) and getattr(dispatch, "__name__", "") == name:
            return dispatch
    raise AssertionError(f"Dispatch {name!r} not found")


def _resolve_response(result: Response | Awaitable[Response]) -> Response:
    if inspect.iscoroutine(result):
        return asyncio.run(cast(Coroutine[Any, Any, Response], result))
    return cast(Response, result)


async def _ok(_request: Request) -> Response:
    return Response(content="ok", status_code=200)


def test_http_setup_adds_security_headers_and_request_id() -> None:
    dispatch = _dispatch_by_name(_app(), "request_logging_middleware")
    request = _request("/ok", headers=[(b"x-request-id", b"req-123")])

    response = asyncio.run(dispatch(request, _ok))

    assert response.headers["X-Request-ID"] == "req-123"
    assert response.headers["X-Frame-Options"] == "DENY"
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["Cache-Control"] == "no-store"


def test_http_setup_generates_request_id_when_absent() -> None:
    dispatch = _dispatch_by_name(_app(), "request_logging_middleware")

    response = asyncio.run(dispatch(_request("/ok"), _ok))

    assert len(response.headers["X-Request-ID"]) == 32


def test_http_setup_rejects_large_request_before_handler() -> None:
    dispatch = _dispatch_by_name(_app(), "request_size_limit_middleware")
    request = _request("/echo", method="POST", headers=[(b"content-length", b"20")])

    response = asyncio.run(dispatch(request, _ok))

    assert response.status_code == 413
    assert b"REQUEST_TOO_LARGE" in response.body


def test_http_setup_serializes_http_exception_payload() -> None:
    handler = _app().exception_handlers[StarletteHTTPException]

    response: Response = _resolve_response(
        handler(
            _request("/not-found"),
            HTTPException(
                status_code=404,
                detail={"error_code": "USER_NOT_FOUND", "message": "missing"},
            ),
        )
    )

    assert response.status_code == 404
    assert b"USER_NOT_FOUND" in response.body


def test_http_setup_hides_unexpected_exception_details() -> None:
    handler = _app().exception_handlers[Exception]

    response: Response = _resolve_response(
        handler(_request("/boom"), RuntimeError("mongo password is hunter2"))
    )

    assert response.status_code == 500
    assert b"INTERNAL_SERVER_ERROR" in response.body
    assert b"hunter2" not in response.body


def test_http_setup_maps_validation_exception_to_400() -> None:
    handler = _app().exception_handlers[RequestValidationError]
    error = RequestValidationError(
        [{"loc": ("body", "email"), "msg": "Field required", "type": "missing"}]
    )

    response: Response = _resolve_response(handler(_request("/validation"), error))

    assert response.status_code == 400
    assert b"VALIDATION_ERROR" in response.body
    assert b"email: Field required" in response.body
