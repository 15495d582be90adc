"""Convenience exports for application schemas."""

from __future__ import annotations

from .auth import (
    LoginSchema,
    LogoutResultSchema,
    LogoutSchema,
    RefreshSchema,
    TokenPairSchema,
    ValidateResultSchema,
    ValidateSchema,
)

__all__ = [
    "LoginSchema",
    "LogoutResultSchema",
    "LogoutSchema",
    "RefreshSchema",
    "TokenPairSchema",
    "ValidateResultSchema",
    "ValidateSchema",
]
