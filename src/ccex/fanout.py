"""Bounded concurrent fan-out with per-item failure isolation.

Runs one task per item under an asyncio.Semaphore, waits for all of them
with asyncio.gather, and splits the outcomes into successes and failures.
A failing item is logged and reported, never raised: one venue market
being down must not block the refresh of every other market.
"""

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from typing import Generic, TypeVar

from ccex.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")
R = TypeVar("R")

DEFAULT_WORKERS = 10


@dataclass
class FanOutResult(Generic[T, R]):
    """Outcome of a fan-out, in input order."""

    succeeded: list[tuple[T, R]] = field(default_factory=list)
    failed: list[tuple[T, Exception]] = field(default_factory=list)


async def fan_out(
    items: Sequence[T],
    fetch_one: Callable[[T], Awaitable[R]],
    workers: int = DEFAULT_WORKERS,
) -> FanOutResult[T, R]:
    """Call fetch_one for every item with at most `workers` calls in flight.

    Each call computes its own result; merging is left to the caller, which
    consumes FanOutResult from a single coroutine.

    Args:
        items: Work items, e.g. currency pairs.
        fetch_one: Coroutine function fetching and parsing one item.
        workers: Maximum concurrent calls.

    Returns:
        FanOutResult with successful (item, result) pairs and failed
        (item, exception) pairs.
    """
    if workers < 1:
        raise ValueError("workers must be at least 1")

    semaphore = asyncio.Semaphore(workers)

    async def _run(item: T) -> R:
        async with semaphore:
            return await fetch_one(item)

    outcomes = await asyncio.gather(
        *(_run(item) for item in items), return_exceptions=True
    )

    result: FanOutResult[T, R] = FanOutResult()
    for item, outcome in zip(items, outcomes):
        if isinstance(outcome, Exception):
            logger.warning("pair_fetch_failed", item=str(item), error=str(outcome))
            result.failed.append((item, outcome))
        elif isinstance(outcome, BaseException):
            # CancelledError and friends are not per-item failures
            raise outcome
        else:
            result.succeeded.append((item, outcome))

    logger.debug(
        "fanout_completed",
        total=len(items),
        succeeded=len(result.succeeded),
        failed=len(result.failed),
    )
    return result
