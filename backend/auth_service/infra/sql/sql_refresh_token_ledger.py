# auth_service/infra/sql/sql_refresh_token_ledger.py
from __future__ import annotations

from datetime import datetime

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from auth_service.services._shared.base import BaseService
from auth_service.services._shared.errors import (
    RefreshFailure,
    RefreshTokenCollisionError,
    RefreshTokenNotFoundError,
    StorageUnavailableError,
    violates,
)
from auth_service.services._shared.ports import RefreshTokenLedger
from auth_service.uow import SQLAlchemyReadOnlyUnitOfWork, SQLAlchemyUnitOfWork

TOKEN_UNIQUE_CONSTRAINT = "uq_refresh_tokens_token"


class SQLRefreshTokenLedger(BaseService, RefreshTokenLedger):
    """
    Refresh token ledger over the ``refresh_tokens`` table.

    ``consume`` relies on the database's row-level atomicity: the conditional
    ``DELETE ... WHERE token = :t AND expires_at > :now`` affects the row for
    exactly one of several concurrent callers.
    """

    def store(self, principal_id: str, token: str, expires_at: datetime) -> None:
        try:
            with self.rw_uow() as uow:
                uow.refresh_tokens.create(user_id=principal_id, token=token, expires_at=expires_at)
        except IntegrityError as exc:
            if violates(exc, TOKEN_UNIQUE_CONSTRAINT):
                raise RefreshTokenCollisionError() from exc
            raise StorageUnavailableError("Refresh ledger rejected the insert") from exc
        except SQLAlchemyError as exc:
            raise StorageUnavailableError("Refresh ledger unavailable") from exc

    def lookup(self, token: str) -> str:
        now = self.now_utc()
        try:
            with self.ro_uow() as uow:
                owner = uow.refresh_tokens.find_live_owner(token, now)
                if owner is None:
                    raise RefreshTokenNotFoundError(self._miss_reason(uow, token))
                return owner
        except SQLAlchemyError as exc:
            raise StorageUnavailableError("Refresh ledger unavailable") from exc

    def delete(self, token: str) -> None:
        try:
            with self.rw_uow() as uow:
                uow.refresh_tokens.delete_by_token(token)
        except SQLAlchemyError as exc:
            raise StorageUnavailableError("Refresh ledger unavailable") from exc

    def consume(self, token: str) -> str:
        now = self.now_utc()
        try:
            with self.rw_uow() as uow:
                owner = uow.refresh_tokens.find_live_owner(token, now)
                if owner is None:
                    raise RefreshTokenNotFoundError(self._miss_reason(uow, token))
                # The delete's row count, not the read above, decides the winner
                if uow.refresh_tokens.delete_live(token, now) != 1:
                    raise RefreshTokenNotFoundError(RefreshFailure.UNKNOWN)
                return owner
        except SQLAlchemyError as exc:
            raise StorageUnavailableError("Refresh ledger unavailable") from exc

    def purge_expired(self, now: datetime | None = None) -> int:
        try:
            with self.rw_uow() as uow:
                return uow.refresh_tokens.delete_expired(now or self.now_utc())
        except SQLAlchemyError as exc:
            raise StorageUnavailableError("Refresh ledger unavailable") from exc

    @staticmethod
    def _miss_reason(
        uow: SQLAlchemyUnitOfWork | SQLAlchemyReadOnlyUnitOfWork, token: str
    ) -> RefreshFailure:
        row = uow.refresh_tokens.get_by_token(token)
        return RefreshFailure.UNKNOWN if row is None else RefreshFailure.EXPIRED
