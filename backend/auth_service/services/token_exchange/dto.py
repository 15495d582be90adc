# auth_service/services/token_exchange/dto.py
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any

from auth_service.core.config import DEFAULT_JWT_SECRET
from auth_service.services._shared.errors import ConfigurationError, ErrorKind

# Minimum HMAC key length outside development/testing (RFC 7518 §3.2)
MIN_SECRET_BYTES = 32

# ---------------------------- Input DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class LoginIn:
    """
    Input DTO for login.

    :param username: Principal username.
    :type username: str
    :param password: Raw password (to be verified, never stored or logged).
    :type password: str
    """

    username: str
    password: str = field(repr=False)


@dataclass(frozen=True, slots=True)
class ValidateIn:
    """Input DTO for access token validation."""

    access_token: str = field(repr=False)


@dataclass(frozen=True, slots=True)
class RefreshIn:
    """
    Input DTO for token refresh.

    :param refresh_token: Opaque refresh token issued by login or a previous refresh.
    :type refresh_token: str
    """

    refresh_token: str = field(repr=False)


@dataclass(frozen=True, slots=True)
class LogoutIn:
    """Input DTO for logout."""

    access_token: str = field(repr=False)


# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class TokenPairOut:
    """
    Output DTO with access and refresh tokens.

    :param access_token: Signed access token.
    :type access_token: str
    :param refresh_token: Opaque, single-use refresh token.
    :type refresh_token: str
    :param expires_at: Access token expiry (UTC).
    :type expires_at: datetime
    """

    access_token: str = field(repr=False)
    refresh_token: str = field(repr=False)
    expires_at: datetime


@dataclass(frozen=True, slots=True)
class TokenPairResult:
    """
    Outcome of login or refresh: either a token pair or an error kind, never both.
    """

    pair: TokenPairOut | None = None
    error: ErrorKind | None = None

    @property
    def ok(self) -> bool:
        return self.pair is not None


@dataclass(frozen=True, slots=True)
class ValidateOut:
    """Validation outcome. Failures carry no detail."""

    valid: bool
    principal_id: str | None = None
    username: str | None = None


@dataclass(frozen=True, slots=True)
class LogoutOut:
    """Logout outcome."""

    success: bool
    error: ErrorKind | None = None


# ------------------------------ Config DTO -------------------------------- #


@dataclass(frozen=True, slots=True)
class AuthTokenConfig:
    """
    Process-wide token configuration, fixed at startup.

    :param secret_key: Symmetric signing key (never logged; hidden from repr).
    :type secret_key: str
    :param access_expires: Access token lifetime.
    :type access_expires: timedelta
    :param refresh_expires: Refresh token lifetime.
    :type refresh_expires: timedelta
    :param algorithm: HMAC algorithm name.
    :type algorithm: str
    """

    secret_key: str = field(repr=False)
    access_expires: timedelta = timedelta(hours=24)
    refresh_expires: timedelta = timedelta(days=7)
    algorithm: str = "HS256"

    @classmethod
    def from_mapping(cls, config: Mapping[str, Any]) -> AuthTokenConfig:
        """
        Build and validate the token configuration from a Flask config mapping.

        :param config: ``app.config`` or any mapping with the same keys.
        :returns: Immutable configuration.
        :raises ConfigurationError: If the secret is missing, a placeholder in
            production, too short outside development/testing, or a TTL or
            algorithm is invalid.
        """
        secret = config.get("JWT_SECRET_KEY")
        env = str(config.get("APP_ENV", "development")).lower()
        relaxed = env in {"development", "testing"} or bool(config.get("TESTING"))

        if not isinstance(secret, str) or not secret.strip():
            raise ConfigurationError("JWT secret is not configured.")
        if secret == DEFAULT_JWT_SECRET and env == "production":
            raise ConfigurationError("JWT secret still has the placeholder value.")
        if not relaxed and len(secret.encode()) < MIN_SECRET_BYTES:
            raise ConfigurationError(f"JWT secret must be at least {MIN_SECRET_BYTES} bytes.")

        algorithm = str(config.get("JWT_ALGORITHM", "HS256")).upper()
        if algorithm not in {"HS256", "HS384", "HS512"}:
            raise ConfigurationError(f"Unsupported signing algorithm: {algorithm}")

        try:
            access = timedelta(seconds=int(config.get("ACCESS_TOKEN_TTL_SECONDS", 86400)))
            refresh = timedelta(seconds=int(config.get("REFRESH_TOKEN_TTL_SECONDS", 604800)))
        except (TypeError, ValueError) as exc:
            raise ConfigurationError("Token TTLs must be integers (seconds).") from exc
        if access <= timedelta(0) or refresh <= timedelta(0):
            raise ConfigurationError("Token TTLs must be positive.")

        return cls(
            secret_key=secret,
            access_expires=access,
            refresh_expires=refresh,
            algorithm=algorithm,
        )
