"""In-flight call de-duplication keyed by fingerprint."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SingleFlight(Generic[T]):
    """Run at most one call per key at a time.

    The first caller for a key (the leader) runs the function; callers arriving
    while it is in flight await the same future and receive its result or its
    exception. Once the call settles the key is free again. If the leader is
    cancelled, its followers retry instead of inheriting the cancellation.
    """

    def __init__(self) -> None:
        self._inflight: dict[str, asyncio.Future[T]] = {}

    async def do(self, key: str, fn: Callable[[], Awaitable[T]]) -> T:
        while (existing := self._inflight.get(key)) is not None:
            logger.debug("Joining in-flight call for %s", key)
            try:
                return await asyncio.shield(existing)
            except asyncio.CancelledError:
                task = asyncio.current_task()
                if not existing.cancelled() or (task is not None and task.cancelling()):
                    raise
                # Only the leader was cancelled; try again, possibly as the new leader
                logger.debug("In-flight call for %s was cancelled, retrying", key)

        future: asyncio.Future[T] = asyncio.get_running_loop().create_future()
        self._inflight[key] = future
        try:
            result = await fn()
        except asyncio.CancelledError:
            future.cancel()
            raise
        except Exception as exc:
            future.set_exception(exc)
            # Retrieve so an exception nobody else awaited is not reported as unhandled
            future.exception()
            raise
        else:
            future.set_result(result)
            return result
        finally:
            del self._inflight[key]

    def in_flight(self, key: str) -> bool:
        return key in self._inflight

    def __len__(self) -> int:
        return len(self._inflight)
