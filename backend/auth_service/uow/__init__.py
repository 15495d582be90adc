"""Transaction scopes handing out repositories that share one session."""

from .base import UnitOfWork
from .sqlalchemy_uow import SQLAlchemyReadOnlyUnitOfWork, SQLAlchemyUnitOfWork

__all__ = ["SQLAlchemyReadOnlyUnitOfWork", "SQLAlchemyUnitOfWork", "UnitOfWork"]
