"""Authentication-related Marshmallow schemas."""

from __future__ import annotations

from typing import Any

from marshmallow import Schema, fields, post_dump, pre_load, validate


class LoginSchema(Schema):
    """Input payload for exchanging credentials for a token pair."""

    username = fields.String(required=True, validate=validate.Length(min=1, max=50))
    password = fields.String(required=True, validate=validate.Length(min=1, max=128))


class ValidateSchema(Schema):
    """Input payload for access token validation.

    ``token`` is accepted as an alias of ``access_token``.
    """

    access_token = fields.String(required=True, validate=validate.Length(min=1))

    @pre_load
    def accept_token_alias(self, data: Any, **_: Any) -> Any:
        if isinstance(data, dict) and "token" in data:
            data = dict(data)
            alias = data.pop("token")
            data.setdefault("access_token", alias)
        return data


class RefreshSchema(Schema):
    """Input payload for refresh token rotation."""

    refresh_token = fields.String(required=True, validate=validate.Length(min=1))


class LogoutSchema(Schema):
    """Body fallback for logout when no ``Authorization`` header is sent."""

    access_token = fields.String(load_default="")


class TokenPairSchema(Schema):
    """Response payload carrying a freshly issued token pair."""

    access_token = fields.String(required=True)
    refresh_token = fields.String(required=True)
    expires_at = fields.DateTime(required=True)
    token_type = fields.Constant("bearer")


class _CompactSchema(Schema):
    """Drop ``None`` members so optional keys are omitted from responses."""

    @post_dump
    def drop_empty(self, data: dict[str, Any], **_: Any) -> dict[str, Any]:
        return {key: value for key, value in data.items() if value is not None}


class ValidateResultSchema(_CompactSchema):
    """Response payload for token validation."""

    valid = fields.Boolean(required=True)
    principal_id = fields.String()
    username = fields.String()


class LogoutResultSchema(_CompactSchema):
    """Response payload for logout."""

    success = fields.Boolean(required=True)
    error = fields.Function(lambda out: out.error.value if out.error else None)
