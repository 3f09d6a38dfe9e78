"""Redis lease backend implementing ILeaseBackend."""

from __future__ import annotations

import uuid

import redis

from deskreview.core.exceptions import LeaseError


class RedisLeaseBackend:
    """Production ILeaseBackend: a single-holder lease per name with a TTL."""

    def __init__(self, host: str = "localhost", port: int = 6379, db: int = 0) -> None:
        self._host = host
        self._port = port
        self._db = db
        self._client = redis.Redis(
            host=host, port=port, db=db, decode_responses=True,
        )

    def acquire(self, name: str, ttl_seconds: int) -> str | None:
        token = uuid.uuid4().hex
        try:
            acquired = self._client.set(name, token, nx=True, ex=ttl_seconds)
        except Exception as exc:
            raise LeaseError(f"Redis SET NX failed for lease={name!r}: {exc}") from exc
        return token if acquired else None

    def release(self, name: str, token: str) -> None:
        """Delete the lease only while ``token`` still holds it."""
        try:
            with self._client.pipeline() as pipe:
                try:
                    pipe.watch(name)
                    if pipe.get(name) != token:
                        pipe.unwatch()
                        return
                    pipe.multi()
                    pipe.delete(name)
                    pipe.execute()
                except redis.WatchError:
                    # Expired and re-taken between GET and DELETE; not ours anymore.
                    return
        except Exception as exc:
            raise LeaseError(f"Redis release failed for lease={name!r}: {exc}") from exc
