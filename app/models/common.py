from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel


def utc_timestamp() -> str:
    """ISO-8601 UTC timestamp with millisecond precision, e.g. ``2024-05-01T10:00:00.000Z``."""
    return (
        datetime.now(timezone.utc)
        .isoformat(timespec="milliseconds")
        .replace("+00:00", "Z")
    )


class ErrorResponse(BaseModel):
    status: Literal[-1] = -1
    error: str
    timestamp: str


class HealthResponse(BaseModel):
    status: Literal[0] = 0
    message: str
    timestamp: str
    environment: str
    pythonVersion: str
    redis: Literal["not_configured", "connected", "error"]
    uptime: float
