"""
JSON logging with request correlation.

Every record leaves the process as one JSON object on stdout. Auth events
carry the principal and a token *fingerprint*; raw tokens never get logged.
"""

from __future__ import annotations

import hashlib
import json
import logging
import sys
from datetime import UTC, datetime
from typing import IO, Any
from uuid import uuid4

from flask import Flask, g, has_request_context, request

REQUEST_ID_HEADER = "X-Request-ID"
CORRELATION_HEADERS = (REQUEST_ID_HEADER, "X-Correlation-ID")

# ``extra=`` fields promoted into the JSON payload
EXTRA_KEYS = (
    "endpoint",
    "elapsed_ms",
    "client_ip",
    "principal",
    "outcome",
    "token",
    "previous",
    "had_session",
    "blacklist_ttl_ms",
)


def token_fingerprint(token: str) -> str:
    """
    Return a short, non-reversible tag for a token.

    The tag lets a sign-in be correlated with the refresh and sign-out that
    later present the same token.
    """
    return hashlib.sha256(token.encode("utf-8")).hexdigest()[:12]


def ensure_request_id() -> str:
    """
    Return the correlation id of the current request.

    Taken from ``X-Request-ID``/``X-Correlation-ID`` when the caller sent one,
    otherwise generated once and cached on :data:`flask.g`. Outside a request
    a fresh UUID is returned.
    """
    if not has_request_context():
        return str(uuid4())
    if "request_id" not in g:
        sent = next((request.headers[h] for h in CORRELATION_HEADERS if request.headers.get(h)), None)
        g.request_id = sent or str(uuid4())
    return g.request_id  # type: ignore[no-any-return]


class JSONFormatter(logging.Formatter):
    """Render a record as a single-line JSON object."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "time": datetime.fromtimestamp(record.created, UTC).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
            "request_id": getattr(record, "request_id", None),
        }
        payload.update({key: getattr(record, key) for key in EXTRA_KEYS if hasattr(record, key)})
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class RequestIdFilter(logging.Filter):
    """Stamp ``request_id`` on records that do not carry one already."""

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "request_id", None) is None:
            record.request_id = ensure_request_id() if has_request_context() else None
        return True


def configure_logging(level: str | int = "INFO", *, stream: IO[str] | None = None) -> None:
    """
    Route the root logger to a single JSON handler.

    :param level: Level name (case-insensitive) or number.
    :param stream: Output stream; stdout by default.
    """
    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(JSONFormatter())
    handler.addFilter(RequestIdFilter())

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level.upper() if isinstance(level, str) else level)


def init_app(app: Flask) -> None:
    """Seed the request id before each request and echo it on the response."""

    app.logger.addFilter(RequestIdFilter())

    @app.before_request
    def _seed_request_id() -> None:
        ensure_request_id()

    @app.after_request
    def _echo_request_id(response):
        response.headers.setdefault(REQUEST_ID_HEADER, ensure_request_id())
        return response


__all__ = ["configure_logging", "ensure_request_id", "init_app", "token_fingerprint"]
