"""Service layer public API.

Re-exports
----------
- :class:`BaseService` (from ``auth_service.services._shared.base``)
- :class:`TokenExchangeService` and its DTOs (from
  ``auth_service.services.token_exchange``)
"""

from __future__ import annotations

from ._shared.base import BaseService
from .token_exchange import (
    AuthTokenConfig,
    LoginIn,
    LogoutIn,
    LogoutOut,
    RefreshIn,
    TokenExchangeService,
    TokenPairOut,
    TokenPairResult,
    ValidateIn,
    ValidateOut,
)

__all__ = [
    "AuthTokenConfig",
    "BaseService",
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
