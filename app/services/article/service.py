from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from app.core.exceptions import ExtractionError, FetchError, StoreError
from app.core.keys import derive_cache_key
from app.models.article.document import ArticleRecord
from app.repositories.article.repository import ArticleRepository
from app.services.article.singleflight import SingleFlight
from app.workers.base import ArticleExtractor, ContentFetcher

logger = logging.getLogger(__name__)

ACCEPTED_FETCH_STATUSES = frozenset({200, 201})


@dataclass(frozen=True)
class RetrievalResult:
    article: ArticleRecord
    cached: bool


class ArticleService:
    """Cache-or-fetch orchestration for article retrieval.

    One request makes at most one fetch and one extraction attempt; nothing
    is retried here.
    """

    def __init__(
        self,
        repo: ArticleRepository,
        fetcher: ContentFetcher,
        extractor: ArticleExtractor,
        ttl_seconds: int,
        inflight: Optional[SingleFlight[RetrievalResult]] = None,
    ) -> None:
        self._repo = repo
        self._fetcher = fetcher
        self._extractor = extractor
        self._ttl_seconds = ttl_seconds
        self._inflight = inflight

    async def retrieve(self, url: str) -> RetrievalResult:
        """Return the article for *url*, from cache when possible.

        *url* is used exactly as given to derive the cache key.

        Raises:
            StoreError: the cache could not be read.
            FetchError: the page could not be fetched or had a bad status.
            ExtractionError: the page holds no extractable article.
        """
        key = derive_cache_key(url)

        cached = await self._repo.get(key)
        if cached is not None:
            logger.debug("Cache hit for %s (key=%s)", url, key)
            return RetrievalResult(article=cached, cached=True)

        logger.debug("Cache miss for %s (key=%s)", url, key)
        if self._inflight is not None:
            return await self._inflight.do(key, lambda: self._fetch_and_store(url, key))
        return await self._fetch_and_store(url, key)

    async def _fetch_and_store(self, url: str, key: str) -> RetrievalResult:
        page = await self._fetcher.fetch(url)
        if page.status_code not in ACCEPTED_FETCH_STATUSES:
            raise FetchError(
                f"Failed to fetch {url}: upstream returned status {page.status_code}",
                status_code=page.status_code,
            )

        article = await self._extractor.extract(page.body, url)
        if article is None or article.is_empty():
            raise ExtractionError()

        try:
            await self._repo.put(key, article, self._ttl_seconds)
        except StoreError as exc:
            # The caller still gets the article; only the cache write is lost.
            logger.warning("Article for %s extracted but not cached: %s", url, exc)
        return RetrievalResult(article=article, cached=False)
