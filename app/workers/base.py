"""Collaborator protocols consumed by ``ArticleService``.

Both are structural: any object with a matching async method can be
passed in, which is how tests supply deterministic fakes.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from app.models.article.document import ArticleRecord, FetchResult


@runtime_checkable
class ContentFetcher(Protocol):
    async def fetch(self, url: str) -> FetchResult:
        """Retrieve the raw page for *url*.

        Raises:
            FetchError: the origin could not be reached at all.
        """
        ...


@runtime_checkable
class ArticleExtractor(Protocol):
    async def extract(self, html: str, url: str) -> ArticleRecord | None:
        """Derive article fields from *html*, or ``None`` when there is no article."""
        ...
