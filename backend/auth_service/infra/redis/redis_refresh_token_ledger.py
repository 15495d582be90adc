# comments in English; reST docstrings
from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime

import redis
from redis.exceptions import RedisError, WatchError

from auth_service.services._shared.errors import (
    RefreshFailure,
    RefreshTokenCollisionError,
    RefreshTokenNotFoundError,
    StorageUnavailableError,
)
from auth_service.services._shared.ports import RefreshTokenLedger


@dataclass(slots=True)
class RedisRefreshTokenLedger(RefreshTokenLedger):
    """
    Redis-backed refresh token ledger.

    Each token is a hash ``rt:{token}`` with ``principal_id``, ``expires_at``
    and ``created_at`` fields. The key TTL matches the remaining lifetime, so
    no compaction job is needed; ``expires_at`` is still checked on every read.

    :param r: A Redis client (already connected).
    """

    r: redis.Redis

    # -------------------- helpers --------------------

    @staticmethod
    def _k(token: str) -> str:
        return f"rt:{token}"

    @staticmethod
    def _to_ts(dt: datetime) -> int:
        return int(dt.timestamp())

    @staticmethod
    def _now() -> datetime:
        return datetime.now(UTC)

    @staticmethod
    def _b(s: bytes | None, default: str = "") -> str:
        return s.decode() if s is not None else default

    # -------------------- API ------------------------

    def store(self, principal_id: str, token: str, expires_at: datetime) -> None:
        """
        Insert the record unless the key already exists.

        ``WATCH`` on the key turns a concurrent insert of the same token into a
        collision instead of an overwrite.
        """
        key = self._k(token)
        now = self._now()
        ttl = max(1, self._to_ts(expires_at) - self._to_ts(now))
        try:
            with self.r.pipeline() as p:
                p.watch(key)
                if p.exists(key):
                    p.unwatch()
                    raise RefreshTokenCollisionError()
                p.multi()
                p.hset(
                    key,
                    mapping={
                        "principal_id": principal_id,
                        "expires_at": str(self._to_ts(expires_at)),
                        "created_at": str(self._to_ts(now)),
                    },
                )
                p.expire(key, ttl)
                p.execute()
        except WatchError as exc:
            raise RefreshTokenCollisionError() from exc
        except RedisError as exc:
            raise StorageUnavailableError("Refresh ledger unavailable") from exc

    def lookup(self, token: str) -> str:
        try:
            h = self.r.hgetall(self._k(token))
        except RedisError as exc:
            raise StorageUnavailableError("Refresh ledger unavailable") from exc
        return self._live_owner(h)

    def delete(self, token: str) -> None:
        try:
            self.r.delete(self._k(token))
        except RedisError as exc:
            raise StorageUnavailableError("Refresh ledger unavailable") from exc

    def consume(self, token: str) -> str:
        """
        Atomically read and delete a live token.

        Uses WATCH/MULTI/EXEC (optimistic locking): if another client touches
        the key between the read and the delete, the transaction aborts and the
        loop re-reads, at which point the token is gone.
        """
        key = self._k(token)
        try:
            while True:
                try:
                    with self.r.pipeline() as p:
                        p.watch(key)
                        h = p.hgetall(key)
                        try:
                            owner = self._live_owner(h)
                        except RefreshTokenNotFoundError:
                            p.unwatch()
                            raise
                        p.multi()
                        p.delete(key)
                        p.execute()
                        return owner
                except WatchError:
                    continue
        except RedisError as exc:
            raise StorageUnavailableError("Refresh ledger unavailable") from exc

    def purge_expired(self, now: datetime | None = None) -> int:
        # Key TTLs already evict expired records
        return 0

    def _live_owner(self, h: dict[bytes, bytes]) -> str:
        if not h:
            raise RefreshTokenNotFoundError(RefreshFailure.UNKNOWN)
        expires_at = int(self._b(h.get(b"expires_at"), "0"))
        if expires_at <= self._to_ts(self._now()):
            raise RefreshTokenNotFoundError(RefreshFailure.EXPIRED)
        return self._b(h.get(b"principal_id"))
