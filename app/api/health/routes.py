from __future__ import annotations

import logging
import platform
import time

from fastapi import APIRouter

from app.core.cache import cache
from app.core.config import settings
from app.core.exceptions import StoreError
from app.models.common import HealthResponse, utc_timestamp

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])

_STARTED_AT = time.monotonic()


async def _redis_status() -> str:
    if not settings.redis_configured:
        return "not_configured"
    try:
        await cache.ping()
    except StoreError as exc:
        logger.error("Redis health check failed: %s", exc)
        return "error"
    return "connected"


@router.get("/health", response_model=HealthResponse, summary="Service health")
async def health() -> HealthResponse:
    """Report store reachability and process uptime.  Always answers 200."""
    return HealthResponse(
        message="Service is healthy",
        timestamp=utc_timestamp(),
        environment=settings.environment,
        pythonVersion=platform.python_version(),
        redis=await _redis_status(),
        uptime=round(time.monotonic() - _STARTED_AT, 3),
    )
