# auth_service/services/_shared/base.py
from __future__ import annotations

import logging
from datetime import UTC, datetime

from auth_service.uow.sqlalchemy_uow import (
    SQLAlchemyReadOnlyUnitOfWork,
    SQLAlchemyUnitOfWork,
)


class BaseService:
    """
    Shared plumbing for the token exchange service and its SQL adapters.

    Gives every subclass a logger named after its module, a UTC clock that
    tests can freeze, and factories for transactional scopes. SQL-backed
    adapters open a scope per operation and never hold a session between
    calls.
    """

    def __init__(self) -> None:
        self.log = logging.getLogger(type(self).__module__)

    def rw_uow(self) -> SQLAlchemyUnitOfWork:
        """Open a scope that commits on success (ledger writes)."""
        return SQLAlchemyUnitOfWork()

    def ro_uow(self) -> SQLAlchemyReadOnlyUnitOfWork:
        """Open a scope that always rolls back (credential lookups)."""
        return SQLAlchemyReadOnlyUnitOfWork()

    @staticmethod
    def now_utc() -> datetime:
        """Timezone-aware current time; refresh expiries are compared against it."""
        return datetime.now(UTC)
