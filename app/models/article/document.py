from __future__ import annotations

from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict


class ArticleRecord(BaseModel):
    """Normalised article fields as cached and returned to callers.

    Every field is optional.  Absent fields are dropped by ``to_fields`` so
    a missing value never shows up as ``null`` in the cache or the response.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    url: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    image: Optional[str] = None
    author: Optional[str] = None
    content: Optional[str] = None
    published: Optional[str] = None
    source: Optional[str] = None

    @classmethod
    def from_fields(cls, fields: Mapping[str, str]) -> ArticleRecord:
        return cls(**{k: v for k, v in fields.items() if v})

    def to_fields(self) -> dict[str, str]:
        return {k: v for k, v in self.model_dump(exclude_none=True).items() if v}

    def is_empty(self) -> bool:
        return not self.to_fields()


class FetchResult(BaseModel):
    """Raw page returned by a content fetcher."""

    url: str
    status_code: int
    body: str
