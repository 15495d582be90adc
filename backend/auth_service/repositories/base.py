"""Common ground for the principal and refresh token repositories.

Repositories translate between rows and Python objects and nothing else:
transaction boundaries belong to the unit of work that hands them a session.
"""

from __future__ import annotations

from typing import Any, Generic, TypeVar, cast

from sqlalchemy.orm import Session

from auth_service.core.extensions import db

E = TypeVar("E")


class BaseRepository(Generic[E]):
    """Persistence helpers for one mapped class, set on ``model`` by subclasses."""

    model: type[E]

    def __init__(self, session: Session | None = None) -> None:
        # Without a unit of work (e.g. ad-hoc shell use) fall back to Flask's session
        self._session = session

    @property
    def session(self) -> Session:
        return self._session if self._session is not None else cast(Session, db.session)

    def add(self, instance: E) -> E:
        """Stage ``instance`` and flush, so unique violations raise inside the caller's scope."""
        self.session.add(instance)
        self.session.flush()
        return instance

    def get(self, entity_id: Any) -> E | None:
        return self.session.get(self.model, entity_id)
