"""Token exchange endpoints backed by :class:`TokenExchangeService`."""

from __future__ import annotations

from flask import Blueprint, current_app, request

from auth_service.api.deps import (
    bearer_token,
    get_exchange_service,
    json_response,
    raise_for_kind,
    timing,
)
from auth_service.core.extensions import limiter
from auth_service.schemas import (
    LoginSchema,
    LogoutResultSchema,
    LogoutSchema,
    RefreshSchema,
    TokenPairSchema,
    ValidateResultSchema,
    ValidateSchema,
)
from auth_service.services.token_exchange import (
    LoginIn,
    LogoutIn,
    RefreshIn,
    TokenPairResult,
    ValidateIn,
)

bp = Blueprint("auth", __name__)

login_schema = LoginSchema()
validate_schema = ValidateSchema()
refresh_schema = RefreshSchema()
logout_schema = LogoutSchema()
token_pair_schema = TokenPairSchema()
validate_result_schema = ValidateResultSchema()
logout_result_schema = LogoutResultSchema()


def _login_rate_limit() -> str:
    return str(current_app.config.get("AUTH_LOGIN_RATE_LIMIT", "10 per minute"))


def _token_pair_response(result: TokenPairResult):
    if not result.ok:
        raise_for_kind(result.error)
    response = json_response(token_pair_schema.dump(result.pair))
    response.headers["Cache-Control"] = "no-store"
    return response


@bp.post("/login")
@limiter.limit(_login_rate_limit)
@timing
def login():
    """Authenticate credentials and issue an access/refresh token pair."""

    data = login_schema.load(request.get_json(silent=True) or {})
    result = get_exchange_service().login(LoginIn(data["username"], data["password"]))
    return _token_pair_response(result)


@bp.post("/validate")
@timing
def validate():
    """Report whether an access token is currently valid."""

    data = validate_schema.load(request.get_json(silent=True) or {})
    out = get_exchange_service().validate(ValidateIn(data["access_token"]))
    return json_response(validate_result_schema.dump(out))


@bp.post("/refresh")
@timing
def refresh():
    """Rotate a refresh token into a new token pair."""

    data = refresh_schema.load(request.get_json(silent=True) or {})
    result = get_exchange_service().refresh(RefreshIn(data["refresh_token"]))
    return _token_pair_response(result)


@bp.post("/logout")
@timing
def logout():
    """Acknowledge logout for a valid access token."""

    token = bearer_token()
    if token is None:
        token = logout_schema.load(request.get_json(silent=True) or {})["access_token"]
    out = get_exchange_service().logout(LogoutIn(token))
    return json_response(logout_result_schema.dump(out))
