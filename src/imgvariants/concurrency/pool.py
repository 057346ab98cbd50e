"""Bounded async pool for warming variants of many images."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ConcurrencyPool:
    """Async dispatcher: one worker per image, bounded by a semaphore.

    Failed images are logged and yield ``None`` in their slot; the rest of the
    batch continues.
    """

    def __init__(self, max_workers: int = 4) -> None:
        self._max_workers = max_workers

    @property
    def max_workers(self) -> int:
        return self._max_workers

    async def process_batch(
        self,
        build_fn: Callable[..., Awaitable[T]],
        paths: list[str | Path],
        **kwargs: Any,
    ) -> list[T | None]:
        """Process a batch of images concurrently.

        Args:
            build_fn: Async callable(path, **kwargs) -> result.
            paths: Source image paths.
            **kwargs: Additional args passed to build_fn.

        Returns one result per path, in input order.
        """
        semaphore = asyncio.Semaphore(self._max_workers)

        async def worker(path: str | Path) -> T:
            async with semaphore:
                return await build_fn(path, **kwargs)

        tasks = [worker(p) for p in paths]
        results = await asyncio.gather(*tasks, return_exceptions=True)

        final: list[T | None] = []
        for path, result in zip(paths, results, strict=True):
            if isinstance(result, Exception):
                logger.error("Image %s failed: %s", path, result)
                final.append(None)
            else:
                final.append(result)

        return final
