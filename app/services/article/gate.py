from __future__ import annotations

import hmac
from collections.abc import Iterable
from typing import Annotated

from pydantic import AnyUrl, TypeAdapter, UrlConstraints, ValidationError

from app.core.exceptions import AuthError, InvalidRequestError
from app.models.article.schemas import ArticleRequest

# No length cap, unlike ``HttpUrl``
_HTTP_URL = TypeAdapter(
    Annotated[AnyUrl, UrlConstraints(allowed_schemes=["http", "https"], host_required=True)]
)


class RequestGate:
    """Validates and authorises an inbound article request.

    Checks run in a fixed order: required fields, URL syntax, credential.
    Nothing reaches the cache or the network before all three pass.
    """

    def __init__(self, credentials: Iterable[str]) -> None:
        self._credentials = tuple(c.encode("utf-8") for c in credentials)

    def check(self, request: ArticleRequest) -> str:
        """Return the URL to retrieve, exactly as the caller sent it.

        Raises:
            InvalidRequestError: ``url`` or ``key`` missing, or ``url`` malformed.
            AuthError: ``key`` is not a configured credential.
        """
        if not request.url or not request.key:
            raise InvalidRequestError("No body attributes received")

        try:
            _HTTP_URL.validate_python(request.url)
        except ValidationError:
            raise InvalidRequestError(f"Invalid URL: {request.url}")

        if not self._is_authorised(request.key):
            raise AuthError()
        return request.url

    def _is_authorised(self, key: str) -> bool:
        candidate = key.encode("utf-8")
        matched = False
        for credential in self._credentials:
            matched |= hmac.compare_digest(candidate, credential)
        return matched
