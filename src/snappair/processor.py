"""Background image work and bounded task scheduling.

Pillow work (decode, scale, compare) blocks, so it runs on a thread pool and
is awaited from the event loop. :func:`run_limited` caps how many coroutines
are in flight at once.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import logging
from pathlib import Path
from typing import Awaitable, Callable, Iterable, List, Optional, TypeVar

from .scoring import Difference, Dimensions, compute_difference, read_dimensions
from .thumbnails import ThumbnailCache

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


class Processor:
    """Runs thumbnail/dimension/compare operations off the event loop."""

    def __init__(self, cache: ThumbnailCache, workers: Optional[int] = None):
        self.cache = cache
        self._executor = concurrent.futures.ThreadPoolExecutor(
            max_workers=workers, thread_name_prefix="snappair"
        )

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self):
        self._executor.shutdown(wait=True)

    async def thumbnail(self, directory, filename) -> Optional[Path]:
        return await self._evaluate(self.cache.get_thumbnail, directory, filename)

    async def dimensions(self, path: Path) -> Dimensions:
        return await self._evaluate(read_dimensions, path)

    async def compare(self, a: Path, b: Path) -> Difference:
        logger.debug("Starting comparison: %s vs %s", a, b)
        result = await self._evaluate(compute_difference, a, b)
        logger.debug("Completed comparison: %s vs %s (equality=%s)", a, b, result.equality)
        return result

    def _evaluate(self, func, *args):
        loop = asyncio.get_running_loop()
        return loop.run_in_executor(self._executor, func, *args)


async def run_limited(
    func: Callable[[T], Awaitable[R]],
    items: Iterable[T],
    concurrency: int,
) -> List[R]:
    """Await ``func(item)`` for every item with at most *concurrency* in flight.

    Results come back in item order. Items are started in order too. If any
    call raises, the remaining ones are cancelled and that exception is
    re-raised as-is.
    """

    semaphore = asyncio.Semaphore(concurrency)

    async def guarded(item):
        async with semaphore:
            return await func(item)

    try:
        async with asyncio.TaskGroup() as tg:
            tasks = [tg.create_task(guarded(item)) for item in items]
    except ExceptionGroup as eg:
        raise eg.exceptions[0]

    return [t.result() for t in tasks]
