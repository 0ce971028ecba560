import logging
from typing import Optional

from redis.asyncio import Redis

logger = logging.getLogger(__name__)


class CacheService:
    """Best-effort wrapper around an async Redis client.

    Holds organization timezone lookups and the per-user search sequence
    counters.  If *redis_client* is ``None`` (Redis unavailable), every
    operation degrades to a no-op and callers fall back to the database
    or to in-process state.
    """

    def __init__(self, redis_client: Optional[Redis] = None) -> None:
        self._redis: Optional[Redis] = redis_client

    # ------------------------------------------------------------------
    # Plain string values
    # ------------------------------------------------------------------

    async def get(self, key: str) -> Optional[str]:
        """Return the raw string value for *key*, or ``None``."""
        if self._redis is None:
            return None
        try:
            return await self._redis.get(key)
        except Exception:
            logger.warning("Redis GET failed for key %s", key)
            return None

    async def set(self, key: str, value: str, ttl: int | None = None) -> None:
        """Store a raw string value, optionally with a TTL (seconds)."""
        if self._redis is None:
            return
        try:
            if ttl:
                await self._redis.setex(key, ttl, value)
            else:
                await self._redis.set(key, value)
        except Exception:
            logger.warning("Redis SET failed for key %s", key)

    async def get_int(self, key: str) -> Optional[int]:
        """Return the integer stored at *key*, or ``None`` if absent or unparsable."""
        raw = await self.get(key)
        if raw is None:
            return None
        try:
            return int(raw)
        except (TypeError, ValueError):
            logger.warning("Non-integer value in cache key %s", key)
            return None

    # ------------------------------------------------------------------
    # Atomic counter used by the search request sequencer
    # ------------------------------------------------------------------

    async def incr(self, key: str, ttl: int | None = None) -> Optional[int]:
        """Increment an integer counter and return the new value.

        Returns ``None`` if Redis is unavailable so the caller can
        fall back to an in-process counter.
        """
        if self._redis is None:
            return None
        try:
            value = await self._redis.incr(key)
            if ttl:
                await self._redis.expire(key, ttl)
            return value
        except Exception:
            logger.warning("Redis INCR failed for key %s", key)
            return None

    async def ping(self) -> bool:
        """Return ``True`` if Redis answers a PING."""
        if self._redis is None:
            return False
        try:
            await self._redis.ping()
            return True
        except Exception:
            logger.warning("Redis PING failed")
            return False

    @property
    def is_available(self) -> bool:
        """Return ``True`` if a Redis client is configured."""
        return self._redis is not None
