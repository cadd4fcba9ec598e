"""JSON logging for the auth core, correlated by request id.

Services log with ``extra={"event": ..., "reason": ..., "user_id": ...}``;
those keys become top-level fields of the JSON line. Credentials and raw
tokens never reach a record: keys listed in :data:`REDACTED_KEYS` are masked
even when a caller passes them by mistake.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from typing import IO, Any
from uuid import uuid4

from flask import Flask, has_request_context, request

REQUEST_ID_HEADER = "X-Request-ID"
CORRELATION_HEADERS = (REQUEST_ID_HEADER, "X-Correlation-ID")
_ENVIRON_KEY = "cmdb.request_id"

EXTRA_KEYS = ("event", "reason", "user_id", "removed", "endpoint", "elapsed_ms")
REDACTED_KEYS = frozenset({"password", "access_token", "refresh_token", "token", "secret"})


class JSONFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "time": datetime.fromtimestamp(record.created, UTC).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
            "request_id": getattr(record, "request_id", None),
        }
        for key in EXTRA_KEYS:
            value = getattr(record, key, None)
            if value is not None:
                payload[key] = value
        for key in REDACTED_KEYS:
            if hasattr(record, key):
                payload[key] = "***"
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class RequestIdFilter(logging.Filter):
    """Stamp every record with the current request id (``None`` outside requests)."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = ensure_request_id() if has_request_context() else None
        return True


def ensure_request_id() -> str:
    """Return the id of the current request, adopting a client-sent one if present.

    Outside a request a fresh id is returned and nothing is stored.
    """
    if not has_request_context():
        return str(uuid4())
    request_id = request.environ.get(_ENVIRON_KEY)
    if request_id is None:
        sent = (request.headers.get(h) for h in CORRELATION_HEADERS)
        request_id = next((value for value in sent if value), None) or str(uuid4())
        request.environ[_ENVIRON_KEY] = request_id
    return request_id


def configure_logging(level: str | int = "INFO", *, stream: IO[str] | None = None) -> None:
    """Send root logging to ``stream`` (stdout by default) as JSON lines."""
    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(JSONFormatter())
    handler.addFilter(RequestIdFilter())

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        level = resolved if isinstance(resolved, int) else logging.INFO
    root.setLevel(level)


def init_app(app: Flask) -> None:
    """Assign a request id before each request and echo it in the response."""
    app.logger.addFilter(RequestIdFilter())

    @app.before_request
    def _seed_request_id() -> None:
        ensure_request_id()

    @app.after_request
    def _echo_request_id(response):
        response.headers.setdefault(REQUEST_ID_HEADER, ensure_request_id())
        return response


__all__ = ["JSONFormatter", "configure_logging", "ensure_request_id", "init_app"]
