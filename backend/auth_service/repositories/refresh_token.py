"""Refresh token repository: insert, live lookup, conditional delete."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import delete, select

from auth_service.models.refresh_token import RefreshToken
from auth_service.repositories.base import BaseRepository


class RefreshTokenRepository(BaseRepository[RefreshToken]):
    """Persistence-only repository for :class:`RefreshToken` rows.

    Expiry comparisons are pushed into SQL so that "expired" and "absent"
    are decided by the same statement that reads or deletes the row.
    """

    model = RefreshToken

    def create(self, *, user_id: str, token: str, expires_at: datetime) -> RefreshToken:
        """Insert a row and flush (raises ``IntegrityError`` on duplicate token)."""
        return self.add(RefreshToken(user_id=user_id, token=token, expires_at=expires_at))

    def get_by_token(self, token: str) -> RefreshToken | None:
        stmt = select(RefreshToken).where(RefreshToken.token == token)
        return self.session.execute(stmt).scalars().first()

    def find_live_owner(self, token: str, now: datetime) -> str | None:
        """Return the owner of ``token`` if it has not expired at ``now``."""
        stmt = select(RefreshToken.user_id).where(
            RefreshToken.token == token,
            RefreshToken.expires_at > now,
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def delete_live(self, token: str, now: datetime) -> int:
        """
        Delete ``token`` only if it is still live.

        :returns: Affected row count (0 or 1). Under concurrency, only one
            caller can observe 1 for the same token.
        """
        stmt = (
            delete(RefreshToken)
            .where(RefreshToken.token == token, RefreshToken.expires_at > now)
            .execution_options(synchronize_session=False)
        )
        return int(self.session.execute(stmt).rowcount or 0)

    def delete_by_token(self, token: str) -> int:
        stmt = (
            delete(RefreshToken)
            .where(RefreshToken.token == token)
            .execution_options(synchronize_session=False)
        )
        return int(self.session.execute(stmt).rowcount or 0)

    def delete_expired(self, now: datetime) -> int:
        stmt = (
            delete(RefreshToken)
            .where(RefreshToken.expires_at <= now)
            .execution_options(synchronize_session=False)
        )
        return int(self.session.execute(stmt).rowcount or 0)

    def count_for_user(self, user_id: str) -> int:
        stmt = select(RefreshToken.id).where(RefreshToken.user_id == user_id)
        return len(self.session.execute(stmt).all())
