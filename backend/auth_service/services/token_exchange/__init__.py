"""Token exchange service: login, validate, refresh and logout."""

from __future__ import annotations

from .dto import (
    AuthTokenConfig,
    LoginIn,
    LogoutIn,
    LogoutOut,
    RefreshIn,
    TokenPairOut,
    TokenPairResult,
    ValidateIn,
    ValidateOut,
)
from .service import TokenExchangeService

__all__ = [
    "AuthTokenConfig",
    "LoginIn",
    "LogoutIn",
    "LogoutOut",
    "RefreshIn",
    "TokenExchangeService",
    "TokenPairOut",
    "TokenPairResult",
    "ValidateIn",
    "ValidateOut",
]
