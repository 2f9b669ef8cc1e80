"""Abstract base class for all Redis-backed repositories.

Every repository in this project must extend ``BaseRepository``.

Extending for a new record type:
    1. Subclass ``BaseRepository`` and add the read/write methods the
       record needs, using ``self._client``.
    2. Wrap ``RedisError`` in ``StoreError`` so callers never see
       transport exceptions.

Example::

    class SessionRepository(BaseRepository):
        async def get(self, sid: str) -> dict[str, str] | None:
            return await self._client.hgetall(sid) or None
"""

from __future__ import annotations

from abc import ABC
from typing import TypeVar

from redis.asyncio import Redis

from app.core.cache import CacheManager

T = TypeVar("T", bound="BaseRepository")


class BaseRepository(ABC):
    """Base class that wires a repository to the shared Redis client.

    The ``from_cache`` classmethod is the standard factory used
    throughout the app.
    """

    def __init__(self, client: Redis) -> None:
        self._client = client

    # ------------------------------------------------------------------
    # Factory
    # ------------------------------------------------------------------

    @classmethod
    def from_cache(cls: type[T], cache: CacheManager) -> T:
        """Instantiate the repository using the live ``CacheManager``.

        Raises ``StoreError`` when the store is not configured.

        Usage::

            repo = ArticleRepository.from_cache(cache)
        """
        return cls(cache.get_client())
