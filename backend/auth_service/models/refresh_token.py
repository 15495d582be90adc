"""Refresh token ledger rows."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from auth_service.core.extensions import db

from .base import CreatedAtMixin, ReprMixin


class RefreshToken(ReprMixin, CreatedAtMixin, db.Model):
    """
    One row per currently issued refresh token.

    ``user_id`` is deliberately not a foreign key: refresh tokens may be kept
    in a different database from the credential records.

    Fields
    ------
    token : str
        Opaque token string; unique lookup key.
    user_id : str
        Owning principal id.
    expires_at : datetime
        Absolute expiry, fixed at creation. Rows past it are treated as absent.
    """

    __tablename__ = "refresh_tokens"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    token: Mapped[str] = mapped_column(String(255), nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (UniqueConstraint("token", name="uq_refresh_tokens_token"),)
