from __future__ import annotations

import secrets
import threading
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol

from auth_service.services._shared.errors import (
    RefreshFailure,
    RefreshTokenCollisionError,
    RefreshTokenNotFoundError,
)

# Bytes of entropy behind each opaque refresh token
REFRESH_TOKEN_BYTES = 48


def generate_refresh_token() -> str:
    """Return a URL-safe, cryptographically random refresh token string."""
    return secrets.token_urlsafe(REFRESH_TOKEN_BYTES)


class RefreshTokenLedger(Protocol):
    """
    Persistent mapping ``token -> (principal_id, expires_at)``.

    A record whose ``expires_at`` has passed is treated as absent even if it is
    still physically stored. ``consume`` MUST be atomic with respect to every
    other ``consume``/``delete`` on the same token.
    """

    def new_token(self) -> str:
        """Generate a new random refresh token string."""
        return generate_refresh_token()

    def store(self, principal_id: str, token: str, expires_at: datetime) -> None:
        """
        Insert a new record.

        :raises RefreshTokenCollisionError: If ``token`` already exists.
        :raises StorageUnavailableError: If the backend cannot be reached.
        """
        ...

    def lookup(self, token: str) -> str:
        """
        Return the owning principal id of a live token.

        :raises RefreshTokenNotFoundError: If absent or expired.
        """
        ...

    def delete(self, token: str) -> None:
        """Remove a record. Deleting an absent token is not an error."""
        ...

    def consume(self, token: str) -> str:
        """
        Atomically look up and delete a live token, returning its principal id.

        :raises RefreshTokenNotFoundError: If absent, expired or already consumed.
        """
        ...

    def purge_expired(self, now: datetime | None = None) -> int:
        """Physically remove expired records. :returns: Number removed."""
        ...


@dataclass(frozen=True, slots=True)
class _Record:
    principal_id: str
    expires_at: datetime
    created_at: datetime


class InMemoryRefreshTokenLedger(RefreshTokenLedger):
    """
    In-memory ledger with atomic consume.

    .. note::
       Uses a threading lock to provide the same atomicity as the SQL/Redis
       adapters; suitable for unit tests and single-process development.
    """

    def __init__(self) -> None:
        self._records: dict[str, _Record] = {}
        self._lock = threading.Lock()

    @staticmethod
    def _now() -> datetime:
        return datetime.now(UTC)

    def store(self, principal_id: str, token: str, expires_at: datetime) -> None:
        with self._lock:
            if token in self._records:
                raise RefreshTokenCollisionError()
            self._records[token] = _Record(
                principal_id=principal_id,
                expires_at=expires_at,
                created_at=self._now(),
            )

    def lookup(self, token: str) -> str:
        with self._lock:
            record = self._records.get(token)
        if record is None:
            raise RefreshTokenNotFoundError(RefreshFailure.UNKNOWN)
        if record.expires_at <= self._now():
            raise RefreshTokenNotFoundError(RefreshFailure.EXPIRED)
        return record.principal_id

    def delete(self, token: str) -> None:
        with self._lock:
            self._records.pop(token, None)

    def consume(self, token: str) -> str:
        with self._lock:
            record = self._records.get(token)
            if record is None:
                raise RefreshTokenNotFoundError(RefreshFailure.UNKNOWN)
            if record.expires_at <= self._now():
                raise RefreshTokenNotFoundError(RefreshFailure.EXPIRED)
            del self._records[token]
            return record.principal_id

    def purge_expired(self, now: datetime | None = None) -> int:
        cutoff = now or self._now()
        with self._lock:
            stale = [t for t, r in self._records.items() if r.expires_at <= cutoff]
            for t in stale:
                del self._records[t]
            return len(stale)

    def __len__(self) -> int:
        return len(self._records)
