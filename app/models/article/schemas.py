from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class ArticleRequest(BaseModel):
    """Request body for POST /.

    Both fields are optional here so that ``RequestGate`` decides how a
    missing field is reported.
    """

    model_config = ConfigDict(extra="ignore")

    url: Optional[str] = None
    key: Optional[str] = None


class ArticleResponse(BaseModel):
    """Success envelope.  ``article`` only carries the fields that were found."""

    model_config = ConfigDict(populate_by_name=True)

    status: Literal[0] = 0
    article: dict[str, str]
    cached: bool
    processing_time: str = Field(alias="processingTime")
    timestamp: str
