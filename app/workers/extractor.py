"""HTML to article extraction.

Two strategies, tried in order:
1. trafilatura: body text plus page metadata (title, author, date, image)
2. readability: Mozilla's readability algorithm, used when trafilatura
   finds no body text

A page counts as an article only if some body text was found.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Optional

import trafilatura
from lxml import html as lxml_html
from lxml.etree import LxmlError
from readability import Document

from app.models.article.document import ArticleRecord

logger = logging.getLogger(__name__)

# trafilatura JSON key -> article field; earlier keys win for the same field
_TRAFILATURA_FIELDS = (
    ("title", "title"),
    ("author", "author"),
    ("text", "content"),
    ("date", "published"),
    ("image", "image"),
    ("description", "description"),
    ("excerpt", "description"),
    ("sitename", "source"),
    ("hostname", "source"),
    ("url", "url"),
    ("source", "url"),
)


def extract_article(html: str, url: str) -> ArticleRecord | None:
    """Extract an article from *html*.

    Args:
        html: Raw page markup
        url: The URL the page was fetched from

    Returns:
        The extracted record, or ``None`` if no body text could be found
    """
    fields = _extract_trafilatura(html, url)
    if not fields.get("content"):
        for name, value in _extract_readability(html).items():
            fields.setdefault(name, value)
    if not fields.get("content"):
        return None
    fields.setdefault("url", url)
    return ArticleRecord.from_fields(fields)


def _extract_trafilatura(html: str, url: str) -> dict[str, str]:
    raw = trafilatura.extract(
        html,
        url=url,
        output_format="json",
        with_metadata=True,
    )
    if not raw:
        return {}
    data = json.loads(raw)

    fields: dict[str, str] = {}
    for key, name in _TRAFILATURA_FIELDS:
        value = data.get(key)
        if isinstance(value, str) and value.strip() and name not in fields:
            fields[name] = value.strip()
    return fields


def _extract_readability(html: str) -> dict[str, str]:
    """Fallback extraction with readability-lxml.

    Readability returns simplified HTML; lxml turns it into plain text so
    both strategies yield the same kind of ``content``.
    """
    try:
        doc = Document(html)
        summary_html = doc.summary()
        title = doc.short_title()
        text = lxml_html.fromstring(summary_html).text_content()
    except (LxmlError, ValueError) as exc:
        logger.debug("readability could not parse document: %s", exc)
        return {}

    lines = [line.strip() for line in text.splitlines() if line.strip()]
    fields: dict[str, str] = {}
    if lines:
        fields["content"] = "\n".join(lines)
    if title and title.strip() and title.strip() != "[no-title]":
        fields["title"] = title.strip()
    return fields


class TrafilaturaExtractor:
    """``ArticleExtractor`` running the synchronous extractors in a worker thread."""

    async def extract(self, html: str, url: str) -> Optional[ArticleRecord]:
        return await asyncio.to_thread(extract_article, html, url)
