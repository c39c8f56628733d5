"""Bounded concurrent execution of coroutine factories."""

import asyncio
import logging
from typing import Any, Awaitable, Callable, List, Sequence, TypeVar, Union

logger = logging.getLogger(__name__)

T = TypeVar("T")


class BoundedTaskPool:
    """Runs a batch of coroutines with at most `max_concurrency` in flight.

    Takes factories rather than coroutines so nothing starts before a slot
    is free. Results come back in input order; failures are returned as
    exception objects instead of cancelling the rest of the batch.
    """

    def __init__(self, max_concurrency: int):
        if max_concurrency < 1:
            raise ValueError(f"max_concurrency must be >= 1, got {max_concurrency}")
        self.max_concurrency = max_concurrency

    async def run_all(
        self, factories: Sequence[Callable[[], Awaitable[T]]]
    ) -> List[Union[T, BaseException]]:
        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def run_with_semaphore(factory: Callable[[], Awaitable[T]]) -> Any:
            async with semaphore:
                return await factory()

        logger.debug(f"Running {len(factories)} task(s) with concurrency {self.max_concurrency}")
        return await asyncio.gather(
            *(run_with_semaphore(factory) for factory in factories), return_exceptions=True
        )
