"""Batching utilities for read-only fan-out.

Balance refreshes that precede a batch have no ordering dependency on each
other, so they are issued concurrently under a semaphore and joined.
"""

import asyncio
from typing import Awaitable, Callable, List, Sequence, TypeVar, Union

# Type variables for generic types
T = TypeVar('T')  # Input type
R = TypeVar('R')  # Result type


async def gather_bounded(
    processor: Callable[[T], Awaitable[R]],
    items: Sequence[T],
    concurrency: int = 10
) -> List[Union[R, BaseException]]:
    """
    Run ``processor`` over ``items`` with limited concurrency.

    Args:
        processor: Async function to process each item
        items: Items to process
        concurrency: Maximum number of concurrent tasks

    Returns:
        Results in input order; a failed item yields its exception instead
        of a result. Cancellation is never swallowed.
    """
    if concurrency < 1:
        raise ValueError("concurrency must be at least 1")

    semaphore = asyncio.Semaphore(concurrency)

    async def process_with_semaphore(item: T) -> R:
        async with semaphore:
            return await processor(item)

    results = await asyncio.gather(
        *[process_with_semaphore(item) for item in items],
        return_exceptions=True
    )
    for result in results:
        if isinstance(result, asyncio.CancelledError):
            raise result
    return list(results)


async def batch_process_requests(
    processor: Callable[[T], Awaitable[R]],
    items: Sequence[T],
    batch_size: int = 50,
    concurrency: int = 10
) -> List[Union[R, BaseException]]:
    """
    Process items in consecutive batches, each bounded by ``concurrency``.

    Args:
        processor: Async function to process each item
        items: Items to process
        batch_size: Maximum number of items per batch
        concurrency: Maximum number of concurrent tasks within a batch

    Returns:
        Results (or exceptions) in the same order as the input items
    """
    results: List[Union[R, BaseException]] = []
    for i in range(0, len(items), batch_size):
        results.extend(await gather_bounded(processor, items[i:i + batch_size], concurrency))
    return results
