"""Principal repository for credential lookups."""

from __future__ import annotations

from typing import cast

from sqlalchemy import select

from auth_service.models.principal import Principal
from auth_service.repositories.base import BaseRepository


class PrincipalRepository(BaseRepository[Principal]):
    """Persistence-only repository for :class:`Principal`.

    It never issues tokens or verifies passwords; it only finds records.
    """

    model = Principal

    def get_by_username(self, username: str) -> Principal | None:
        """Fetch a principal by exact (trimmed) username.

        :param username: Login name to search.
        :type username: str
        :returns: Principal instance or ``None`` when not found.
        :rtype: Principal | None
        """
        stmt = select(Principal).where(Principal.username == username.strip())
        result = self.session.execute(stmt).scalars().first()
        return cast(Principal | None, result)

    def exists_by_username(self, username: str) -> bool:
        stmt = select(Principal.id).where(Principal.username == username.strip())
        return bool(self.session.execute(stmt).first())

