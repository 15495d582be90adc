"""Problem Details (RFC 7807) rendering for every error the API can return.

Bodies look like::

    {"type": "about:blank", "title": "Unauthorized", "status": 401,
     "detail": "Invalid or expired refresh token", "instance": "/api/v1/auth/refresh",
     "code": "invalid_refresh_token", "request_id": "..."}

``code`` is the stable, machine-readable part. For token exchange failures it
is the public error kind (``invalid_credentials``, ``invalid_token``,
``invalid_refresh_token``, ``storage_unavailable``); internal reasons never
appear here.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any

from flask import Flask, Response, jsonify, request
from marshmallow import ValidationError
from sqlalchemy.exc import OperationalError
from werkzeug.exceptions import HTTPException

from auth_service.core.logger import ensure_request_id

log = logging.getLogger(__name__)

PROBLEM_MIMETYPE = "application/problem+json"

# Seconds suggested to clients after an infrastructure fault
RETRY_AFTER_SECONDS = 5

HTTP_CODES: dict[int, str] = {
    400: "bad_request",
    401: "unauthorized",
    404: "not_found",
    405: "method_not_allowed",
    415: "unsupported_media_type",
    422: "validation_error",
    429: "too_many_requests",
    500: "internal_server_error",
    503: "service_unavailable",
}


def problem_response(
    status: int,
    code: str,
    detail: str,
    *,
    extra: dict[str, Any] | None = None,
) -> Response:
    """
    Build a ``application/problem+json`` response.

    :param status: HTTP status code.
    :param code: Stable error code.
    :param detail: Client-safe description.
    :param extra: Optional additional members (e.g. validation messages).
    """
    body: dict[str, Any] = {
        "type": "about:blank",
        "title": HTTPStatus(status).phrase,
        "status": status,
        "detail": detail,
        "instance": request.path,
        "code": code,
        "request_id": ensure_request_id(),
    }
    if extra:
        body.update(extra)

    response = jsonify(body)
    response.status_code = status
    response.mimetype = PROBLEM_MIMETYPE
    if status == HTTPStatus.SERVICE_UNAVAILABLE:
        response.headers["Retry-After"] = str(RETRY_AFTER_SECONDS)
    return response


class APIError(Exception):
    """
    An error the API layer raises on purpose.

    :param message: Client-safe description.
    :param status_code: HTTP status (default 400).
    :param code: Stable error code; defaults to the generic code for the status.
    """

    status_code: int = HTTPStatus.BAD_REQUEST

    def __init__(self, message: str, status_code: int | None = None, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = int(status_code)
        self.code = code or HTTP_CODES.get(self.status_code, "error")


class Unauthorized(APIError):
    """Rejected credentials or tokens (401)."""

    status_code = HTTPStatus.UNAUTHORIZED


class ServiceUnavailable(APIError):
    """A backing store is down; the client may retry (503)."""

    status_code = HTTPStatus.SERVICE_UNAVAILABLE


def init_app(app: Flask) -> None:
    """Register handlers so that no error leaves the app as HTML."""

    @app.errorhandler(APIError)
    def _api_error(err: APIError):
        level = logging.ERROR if err.status_code >= 500 else logging.INFO
        log.log(level, "api.error", extra={"event": "api_error", "reason": err.code})
        return problem_response(err.status_code, err.code, err.message)

    @app.errorhandler(ValidationError)
    def _validation_error(err: ValidationError):
        log.info("api.invalid_payload", extra={"event": "api_error", "reason": "validation_error"})
        return problem_response(
            HTTPStatus.UNPROCESSABLE_ENTITY,
            "validation_error",
            "Request body failed validation",
            extra={"errors": err.messages},
        )

    @app.errorhandler(HTTPException)
    def _http_error(err: HTTPException):
        status = int(err.code or HTTPStatus.INTERNAL_SERVER_ERROR)
        detail = (err.description or HTTPStatus(status).phrase).strip()
        if status == HTTPStatus.NOT_FOUND:
            detail = f"Route '{request.path}' not found"
        return problem_response(status, HTTP_CODES.get(status, "error"), detail)

    @app.errorhandler(OperationalError)
    def _database_down(err: OperationalError):
        log.error("api.database_unavailable", exc_info=err)
        return problem_response(
            HTTPStatus.SERVICE_UNAVAILABLE,
            "storage_unavailable",
            "Service temporarily unavailable",
        )

    @app.errorhandler(Exception)
    def _unexpected(err: Exception):
        log.error("api.unhandled", exc_info=err)
        return problem_response(
            HTTPStatus.INTERNAL_SERVER_ERROR,
            "internal_server_error",
            "Unexpected error",
        )
