"""Column mixins shared by the principal and refresh token tables."""

from __future__ import annotations

from datetime import datetime
from uuid import uuid4

from sqlalchemy import DateTime, String, func
from sqlalchemy.orm import Mapped, mapped_column


def _new_id() -> str:
    return str(uuid4())


class UUIDPKMixin:
    """String UUID4 primary key, assigned in Python so it exists before flush."""

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)


class CreatedAtMixin:
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )


class ReprMixin:
    def __repr__(self) -> str:
        return f"<{type(self).__name__} id={getattr(self, 'id', None)}>"
