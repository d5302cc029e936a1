"""JSON line logging for the storefront API.

Every record carries the request correlation id so that auth events can be
traced back to the HTTP request that produced them. Secrets (passwords,
raw tokens) must never be passed in ``extra``.
"""

from __future__ import annotations

import json
import logging
import sys
from contextvars import ContextVar, Token
from datetime import datetime, timezone
from typing import Any, Iterable

CORRELATION_ID_CTX: ContextVar[str] = ContextVar("correlation_id", default="")

DEFAULT_EXTRA_KEYS: tuple[str, ...] = (
    "user_id",
    "product_id",
    "list_name",
    "reason",
    "path",
    "method",
    "status_code",
    "duration_ms",
)


class JsonLogFormatter(logging.Formatter):
    """Serialize log records into compact JSON lines."""

    def __init__(self, extra_keys: Iterable[str] = DEFAULT_EXTRA_KEYS) -> None:
        super().__init__()
        self._extra_keys = tuple(extra_keys)

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "event": record.getMessage(),
        }
        correlation_id = CORRELATION_ID_CTX.get()
        if correlation_id:
            payload["correlation_id"] = correlation_id

        for key in self._extra_keys:
            value = getattr(record, key, None)
            if value not in (None, ""):
                payload[key] = value

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, ensure_ascii=False, default=str)


def setup_logging(level: str = "INFO") -> None:
    """Route all loggers through a single stdout JSON handler."""
    normalized_level = getattr(logging, level.upper(), logging.INFO)
    handler = logging.StreamHandler(stream=sys.stdout)
    handler.setFormatter(JsonLogFormatter())

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(normalized_level)
    root_logger.addHandler(handler)

    # uvicorn installs its own handlers; let them propagate to ours instead.
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        logging.getLogger(name).handlers.clear()
        logging.getLogger(name).propagate = True


def bind_correlation_id(correlation_id: str) -> Token[str]:
    """Bind correlation id to the current context and return the reset token."""
    return CORRELATION_ID_CTX.set(correlation_id)


def unbind_correlation_id(token: Token[str]) -> None:
    """Restore the correlation id that was active before ``bind_correlation_id``."""
    CORRELATION_ID_CTX.reset(token)
