from __future__ import annotations

import hashlib


def derive_cache_key(url: str) -> str:
    """Return the cache key for *url*.

    The key is the hex SHA-1 of the URL exactly as supplied.  Nothing is
    normalised, so ``https://ex.com/a`` and ``https://ex.com/a/`` map to
    different entries.
    """
    return hashlib.sha1(url.encode("utf-8")).hexdigest()
