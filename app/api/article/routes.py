from __future__ import annotations

import logging
import time

from fastapi import APIRouter, Depends

from app.core.cache import cache
from app.core.config import settings
from app.core.exceptions import (
    ExtractionError,
    FetchError,
    GatewayError,
    StoreError,
    UnexpectedError,
)
from app.models.article.schemas import ArticleRequest, ArticleResponse
from app.models.common import ErrorResponse, utc_timestamp
from app.repositories.article.repository import ArticleRepository
from app.services.article.gate import RequestGate
from app.services.article.service import ArticleService, RetrievalResult
from app.services.article.singleflight import SingleFlight
from app.workers.extractor import TrafilaturaExtractor
from app.workers.fetcher import HttpContentFetcher

logger = logging.getLogger(__name__)

router = APIRouter(tags=["article"])

#: Process-wide registry used when ``COALESCE_REQUESTS`` is enabled.
_inflight: SingleFlight[RetrievalResult] = SingleFlight()


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------


def _get_gate() -> RequestGate:
    """FastAPI dependency that builds a ``RequestGate`` from the loaded settings."""
    return RequestGate(settings.credentials)


def _build_service() -> ArticleService:
    """Build an ``ArticleService`` for one request.

    Called only after the gate has passed so an unconfigured store never
    masks a validation or credential failure.
    """
    return ArticleService(
        ArticleRepository.from_cache(cache),
        HttpContentFetcher(),
        TrafilaturaExtractor(),
        ttl_seconds=settings.cache_ttl_seconds,
        inflight=_inflight if settings.coalesce_requests else None,
    )


# ---------------------------------------------------------------------------
# POST /
# ---------------------------------------------------------------------------


@router.post(
    "/",
    status_code=200,
    response_model=ArticleResponse,
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        405: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
    summary="Return the parsed article for a URL",
)
async def post_article(
    request: ArticleRequest,
    gate: RequestGate = Depends(_get_gate),
) -> ArticleResponse:
    """Return the article found at ``url``, served from cache when possible.

    - **200**: article returned; ``cached`` tells whether it came from cache
    - **400**: missing ``url``/``key`` or malformed URL
    - **401**: ``key`` is not an accepted credential
    - **500**: fetch, extraction or cache failure
    """
    started = time.perf_counter()
    url = gate.check(request)

    try:
        result = await _build_service().retrieve(url)
    except (FetchError, ExtractionError) as exc:
        logger.warning("POST / could not retrieve %s: %s", url, exc)
        raise
    except StoreError as exc:
        logger.error("POST / cache unavailable for %s: %s", url, exc)
        raise
    except GatewayError:
        raise
    except Exception as exc:
        logger.exception("POST / unexpected error for %s", url)
        raise UnexpectedError(str(exc)) from exc

    elapsed_ms = round((time.perf_counter() - started) * 1000)
    return ArticleResponse(
        article=result.article.to_fields(),
        cached=result.cached,
        processing_time=f"{elapsed_ms}ms",
        timestamp=utc_timestamp(),
    )
