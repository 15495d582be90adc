"""Transactional boundary shared by the credential store and the SQL ledger."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from auth_service.repositories import PrincipalRepository, RefreshTokenRepository


class UnitOfWork(ABC):
    """
    One transaction around a single ledger or credential operation.

    Used as a context manager: a clean exit commits, an exception rolls back
    and propagates. Subclasses supply the repositories and the transaction
    primitives.
    """

    principals: PrincipalRepository
    refresh_tokens: RefreshTokenRepository

    def __enter__(self) -> UnitOfWork:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is not None:
            self.rollback()
            return
        try:
            self.commit()
        except Exception:
            self.rollback()
            raise

    @abstractmethod
    def commit(self) -> None: ...

    @abstractmethod
    def rollback(self) -> None: ...
