from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Generic, TypeVar

logger = logging.getLogger(__name__)

R = TypeVar("R")


class _LeaderCancelled(Exception):
    """Handed to joiners when the caller running the work was cancelled."""


class SingleFlight(Generic[R]):
    """Coalesce concurrent calls that share a key into one unit of work.

    The first caller for a key runs ``work``; callers arriving while it is
    still running await the same result (or exception).  The key is released
    as soon as the work finishes, so a later call starts fresh.

    If the running caller is cancelled, one of the joiners takes the work
    over and the rest join it; cancellation never reaches the joiners.
    """

    def __init__(self) -> None:
        self._calls: dict[str, asyncio.Future[R]] = {}

    async def do(self, key: str, work: Callable[[], Awaitable[R]]) -> R:
        while True:
            pending = self._calls.get(key)
            if pending is None:
                break
            logger.debug("Joining in-flight work for key=%s", key)
            try:
                return await asyncio.shield(pending)
            except _LeaderCancelled:
                logger.debug("In-flight work for key=%s was cancelled; taking over", key)

        future: asyncio.Future[R] = asyncio.get_running_loop().create_future()
        self._calls[key] = future
        try:
            result = await work()
        except asyncio.CancelledError:
            future.set_exception(_LeaderCancelled())
            future.exception()
            raise
        except Exception as exc:
            future.set_exception(exc)
            # Mark as retrieved when nobody joined.
            future.exception()
            raise
        else:
            future.set_result(result)
            return result
        finally:
            if self._calls.get(key) is future:
                del self._calls[key]
