from __future__ import annotations

import logging

from redis.exceptions import RedisError

from app.core.exceptions import StoreError
from app.models.article.document import ArticleRecord
from app.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class ArticleRepository(BaseRepository):
    """Redis repository holding one hash per cached article.

    Keys are the digests produced by ``derive_cache_key`` and are used as-is,
    which keeps entries written by earlier deployments readable.
    """

    async def get(self, key: str) -> ArticleRecord | None:
        """Return the cached record under *key*, or ``None`` on a miss.

        ``HGETALL`` answers an empty mapping for both "never written" and
        "expired"; either way, and for a hash that somehow holds no usable
        fields, this returns ``None``.
        """
        try:
            fields = await self._client.hgetall(key)
        except RedisError as exc:
            logger.exception("Redis read failed for key=%s", key)
            raise StoreError("Cache read error") from exc

        if not fields:
            return None
        record = ArticleRecord.from_fields(fields)
        return None if record.is_empty() else record

    async def put(self, key: str, record: ArticleRecord, ttl_seconds: int) -> None:
        """Write every field of *record* under *key* with an expiry.

        ``DEL``, ``HSET`` and ``EXPIRE`` run inside one ``MULTI/EXEC``
        transaction.  A reader never observes a partial record or fields left
        over from an earlier write, and a record never exists without its TTL.
        """
        if ttl_seconds <= 0:
            raise ValueError(f"ttl_seconds must be positive, got {ttl_seconds}")
        fields = record.to_fields()
        if not fields:
            raise ValueError("Refusing to cache an empty article record")

        try:
            async with self._client.pipeline(transaction=True) as pipe:
                pipe.delete(key)
                pipe.hset(key, mapping=fields)
                pipe.expire(key, ttl_seconds)
                await pipe.execute()
        except RedisError as exc:
            logger.exception("Redis write failed for key=%s", key)
            raise StoreError("Cache write error") from exc
