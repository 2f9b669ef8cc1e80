from __future__ import annotations

import logging

from redis.asyncio import Redis
from redis.exceptions import RedisError

from app.core.config import settings
from app.core.exceptions import StoreError

logger = logging.getLogger(__name__)


class CacheManager:
    """Singleton Redis connection manager.

    Use the module-level ``cache`` instance; do not instantiate directly.

    Lifecycle::

        await cache.connect()     # call once at startup
        ...
        await cache.disconnect()  # call once at shutdown

    When ``REDIS_URL`` is unset the manager stays unconfigured and every
    store operation fails with :class:`StoreError`.
    """

    _instance: CacheManager | None = None
    _client: Redis | None = None

    def __new__(cls) -> CacheManager:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    async def connect(self) -> None:
        """Create the Redis client.

        The client connects lazily, so an unreachable store does not stop
        the service from starting; ``/health`` reports it instead.
        """
        if not settings.redis_configured:
            logger.warning("REDIS_URL is not set; article caching is unavailable.")
            return
        self._client = Redis.from_url(
            settings.redis_url,
            password=settings.redis_token or None,
            decode_responses=True,
        )
        logger.info("Redis client created.")

    async def disconnect(self) -> None:
        """Close the Redis client and release its connection pool."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            logger.info("Redis client closed.")

    def get_client(self) -> Redis:
        if self._client is None:
            raise StoreError("Cache store is not configured")
        return self._client

    async def ping(self) -> bool:
        """Round-trip a PING to the store.

        Raises:
            StoreError: the store is unconfigured or unreachable.
        """
        client = self.get_client()
        try:
            return bool(await client.ping())
        except RedisError as exc:
            raise StoreError(f"Redis ping failed: {exc}") from exc


#: Module-level singleton; import and use this everywhere.
cache: CacheManager = CacheManager()
