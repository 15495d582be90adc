"""Shared API helpers for request parsing and cross-cutting concerns."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable
from typing import Any, TypeVar

from flask import Response, current_app, jsonify, request

from auth_service.core.errors import ServiceUnavailable, Unauthorized
from auth_service.services._shared.errors import ErrorKind
from auth_service.services.token_exchange import TokenExchangeService

F = TypeVar("F", bound=Callable[..., Any])

EXTENSION_KEY = "token_exchange"

_MESSAGES: dict[ErrorKind, str] = {
    ErrorKind.INVALID_CREDENTIALS: "Invalid username or password",
    ErrorKind.INVALID_TOKEN: "Invalid or expired access token",
    ErrorKind.INVALID_REFRESH_TOKEN: "Invalid or expired refresh token",
    ErrorKind.STORAGE_UNAVAILABLE: "Service temporarily unavailable",
}


def get_exchange_service() -> TokenExchangeService:
    """Return the token exchange service built by the application factory."""

    return current_app.extensions[EXTENSION_KEY]


def bearer_token() -> str | None:
    """Extract the token from an ``Authorization: Bearer <token>`` header."""

    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def raise_for_kind(kind: ErrorKind) -> None:
    """Translate a public error kind into the matching :class:`APIError`."""

    message = _MESSAGES[kind]
    if kind is ErrorKind.STORAGE_UNAVAILABLE:
        raise ServiceUnavailable(message, code=kind.value)
    raise Unauthorized(message, code=kind.value)


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""

    response = jsonify(payload)
    response.status_code = status
    return response


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            current_app.logger.debug(
                "request.elapsed",
                extra={"endpoint": request.endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]
