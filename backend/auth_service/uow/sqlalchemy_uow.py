"""Units of work over the Flask-SQLAlchemy session."""

from __future__ import annotations

from sqlalchemy import event
from sqlalchemy.orm import Session

from auth_service.core.extensions import db
from auth_service.repositories import PrincipalRepository, RefreshTokenRepository
from auth_service.uow.base import UnitOfWork


class _Repositories:
    """Principal and refresh token repositories bound to one session."""

    def __init__(self, session: Session) -> None:
        self.session = session
        self.principals = PrincipalRepository(session=session)
        self.refresh_tokens = RefreshTokenRepository(session=session)


class SQLAlchemyUnitOfWork(_Repositories, UnitOfWork):
    """Writer scope used by the SQL refresh token ledger."""

    def __init__(self) -> None:
        super().__init__(db.session)

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


class SQLAlchemyReadOnlyUnitOfWork(_Repositories, UnitOfWork):
    """
    Reader scope used for credential lookups.

    While the block runs any flush carrying pending changes raises
    ``RuntimeError``; on exit the transaction is always rolled back.
    """

    def __init__(self) -> None:
        # The thread's concrete session, so the flush guard stays request-local
        super().__init__(db.session())
        self._guarded = False

    def __enter__(self) -> SQLAlchemyReadOnlyUnitOfWork:
        event.listen(self.session, "before_flush", self._refuse_writes)
        self._guarded = True
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            self.rollback()
        finally:
            if self._guarded:
                event.remove(self.session, "before_flush", self._refuse_writes)
                self._guarded = False

    @staticmethod
    def _refuse_writes(session, flush_context, instances) -> None:
        if session.new or session.dirty or session.deleted:
            raise RuntimeError("Read-only unit of work: refusing to flush pending changes.")

    def commit(self) -> None:
        raise RuntimeError("Read-only unit of work cannot commit.")

    def rollback(self) -> None:
        self.session.rollback()
