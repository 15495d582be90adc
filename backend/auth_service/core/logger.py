"""JSON logging for the auth service, correlated by request id.

Every record leaves the process as one JSON object on stdout. Records emitted
while a request is active carry its ``request_id``; the same id is echoed to
the client in ``X-Request-ID``.

Credentials and token strings must never reach a log line. The service layer
only passes identifiers (``principal_id``, ``jti``) through ``extra``; as a
second line of defence the formatter masks any attribute named in
:data:`SENSITIVE_KEYS`.
"""

from __future__ import annotations

import json
import logging
import re
import sys
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from flask import Flask, Response, g, has_request_context, request

REQUEST_ID_HEADER = "X-Request-ID"
CORRELATION_HEADERS = (REQUEST_ID_HEADER, "X-Correlation-ID")

# Caller-supplied ids are echoed into logs and headers, so keep them tame
_SAFE_REQUEST_ID = re.compile(r"^[A-Za-z0-9._:-]{1,128}$")

EXTRA_KEYS = ("event", "principal_id", "reason", "jti", "endpoint", "elapsed_ms")
SENSITIVE_KEYS = frozenset({"password", "access_token", "refresh_token", "token", "secret_key"})
REDACTED = "***"


class JSONFormatter(logging.Formatter):
    """Render a record as a single JSON line with the structured extras promoted."""

    def __init__(self, service: str = "auth-service") -> None:
        super().__init__()
        self.service = service

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "time": datetime.fromtimestamp(record.created, UTC).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "service": self.service,
            "logger": record.name,
            "message": record.getMessage(),
            "request_id": getattr(record, "request_id", None),
        }
        for key in EXTRA_KEYS:
            value = getattr(record, key, None)
            if value is not None:
                payload[key] = value
        for key in SENSITIVE_KEYS:
            if hasattr(record, key):
                payload[key] = REDACTED
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class RequestIdFilter(logging.Filter):
    """Stamp ``request_id`` on every record (``None`` outside a request)."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = ensure_request_id() if has_request_context() else None
        return True


def _incoming_request_id() -> str | None:
    for header in CORRELATION_HEADERS:
        value = request.headers.get(header, "").strip()
        if value and _SAFE_REQUEST_ID.match(value):
            return value
    return None


def ensure_request_id() -> str:
    """Return the id of the active request, adopting or minting one on first use.

    Outside a request context a fresh id is returned each call.
    """
    if not has_request_context():
        return str(uuid4())
    request_id = g.get("request_id")
    if request_id is None:
        request_id = _incoming_request_id() or str(uuid4())
        g.request_id = request_id
    return request_id


def configure_logging(level: str | int = "INFO") -> None:
    """Route the root logger to stdout through :class:`JSONFormatter`.

    :param level: Level name (case-insensitive) or numeric level. Unknown
        names fall back to ``INFO``.
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())
    handler.addFilter(RequestIdFilter())

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    if isinstance(level, str):
        resolved = logging.getLevelName(level.strip().upper())
        level = resolved if isinstance(resolved, int) else logging.INFO
    root.setLevel(level)

    # Werkzeug's access log duplicates gunicorn's
    logging.getLogger("werkzeug").setLevel(max(level, logging.WARNING))


def init_app(app: Flask) -> None:
    """Seed the request id before each request and echo it on the response."""

    app.logger.addFilter(RequestIdFilter())

    @app.before_request
    def _seed_request_id() -> None:
        ensure_request_id()

    @app.after_request
    def _echo_request_id(response: Response) -> Response:
        response.headers.setdefault(REQUEST_ID_HEADER, ensure_request_id())
        return response


__all__ = ["JSONFormatter", "configure_logging", "ensure_request_id", "init_app"]
