"""Repository package exposing persistence-layer access for the auth models."""

from __future__ import annotations

from auth_service.repositories.base import BaseRepository
from auth_service.repositories.principal import PrincipalRepository
from auth_service.repositories.refresh_token import RefreshTokenRepository

__all__ = [
    "BaseRepository",
    "PrincipalRepository",
    "RefreshTokenRepository",
]
