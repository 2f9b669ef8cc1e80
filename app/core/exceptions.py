"""Error taxonomy shared by the gateway.

Every error a request can end with derives from ``GatewayError``.  The
exception handler in ``app.main`` turns them into the ``status: -1``
envelope using ``status_code`` and ``public_message``.
"""

from __future__ import annotations

from typing import Optional


class GatewayError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code: int = 500
    production_message: Optional[str] = None

    def public_message(self, production: bool) -> str:
        """Message safe to return to the caller.

        Outside production the raw message is returned; in production
        subclasses that set ``production_message`` have it replaced.
        """
        if production and self.production_message is not None:
            return self.production_message
        return str(self)


class InvalidRequestError(GatewayError):
    """Malformed or missing request fields."""

    status_code = 400


class AuthError(GatewayError):
    """Credential not recognised."""

    status_code = 401

    def __init__(self, message: str = "Invalid secret key") -> None:
        super().__init__(message)


class FetchError(GatewayError):
    """The origin could not be reached or answered with a disallowed status."""

    production_message = "Failed to fetch the requested URL"

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.upstream_status = status_code


class ExtractionError(GatewayError):
    """No article could be derived from the fetched page."""

    def __init__(self, message: str = "Can not extract article") -> None:
        super().__init__(message)


class StoreError(GatewayError):
    """The cache store is unavailable or rejected an operation."""

    production_message = "Service temporarily unavailable"


class UnexpectedError(GatewayError):
    production_message = "Internal server error"


__all__ = [
    "GatewayError",
    "InvalidRequestError",
    "AuthError",
    "FetchError",
    "ExtractionError",
    "StoreError",
    "UnexpectedError",
]
