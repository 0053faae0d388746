"""Generic async helpers: bounded concurrency, timeouts, fallbacks, races, retries.

None of these helpers cancel work they stop waiting for. An operation that
loses a race or outlives a timeout keeps running in the background and its
outcome is discarded.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, List, Optional, Sequence, Set, Tuple, Type, TypeVar

from .exceptions import AllStrategiesFailedError

logger = logging.getLogger(__name__)

T = TypeVar("T")
Operation = Callable[[], Awaitable[T]]

# Strong references to abandoned tasks so they run to completion.
_orphans: Set["asyncio.Task[Any]"] = set()


def _adopt(task: "asyncio.Task[Any]") -> None:
    """Keep an abandoned task alive and swallow its eventual outcome."""
    if task.done():
        _discard(task)
        return
    _orphans.add(task)
    task.add_done_callback(_discard)


def _discard(task: "asyncio.Task[Any]") -> None:
    _orphans.discard(task)
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.debug(f"Abandoned operation failed: {exc}")


async def run_with_concurrency(
    operations: Sequence[Operation[T]], concurrency: int = 3
) -> List[Optional[T]]:
    """Run operations with at most ``concurrency`` in flight.

    Results keep the input order. A failing operation leaves ``None`` in its
    slot and does not stop the others. Returns once every operation settled.
    """
    if concurrency < 1:
        raise ValueError("concurrency must be at least 1")

    results: List[Optional[T]] = [None] * len(operations)
    next_index = 0

    async def worker() -> None:
        nonlocal next_index
        while next_index < len(operations):
            index = next_index
            next_index += 1
            try:
                results[index] = await operations[index]()
            except Exception as e:
                logger.error(f"Error in task {index}: {e}")
                results[index] = None

    workers = min(concurrency, len(operations))
    await asyncio.gather(*(worker() for _ in range(workers)))
    return results


async def with_timeout(
    operation: Operation[T], timeout: float, fallback: Any = None
) -> Any:
    """Return the operation's result, or ``fallback`` once ``timeout`` seconds pass.

    An operation that raises before the deadline also yields ``fallback``.
    """
    task = asyncio.ensure_future(operation())
    done, _ = await asyncio.wait({task}, timeout=timeout)
    if not done:
        logger.warning(f"Operation timed out after {timeout}s")
        _adopt(task)
        return fallback
    try:
        return task.result()
    except Exception as e:
        logger.error(f"Operation failed before timeout: {e}")
        return fallback


async def try_strategies(strategies: Sequence[Operation[T]]) -> T:
    """Try each strategy in order and return the first success.

    Raises:
        AllStrategiesFailedError: carrying every failure, in order.
    """
    errors: List[BaseException] = []
    for index, strategy in enumerate(strategies):
        try:
            return await strategy()
        except Exception as e:
            logger.info(f"Strategy {index + 1} of {len(strategies)} failed: {e}")
            errors.append(e)
    raise AllStrategiesFailedError(errors)


async def first_completed(operations: Sequence[Operation[T]]) -> T:
    """Start every operation and return the first successful result.

    Failures are skipped while other operations are still pending. The
    operations that did not win keep running and are ignored.

    Raises:
        AllStrategiesFailedError: if every operation fails.
    """
    pending: Set["asyncio.Task[T]"] = {
        asyncio.ensure_future(op()) for op in operations
    }
    errors: List[BaseException] = []
    while pending:
        done, pending = await asyncio.wait(pending, return_when=asyncio.FIRST_COMPLETED)
        winner: Optional["asyncio.Task[T]"] = None
        for task in done:
            exc = task.exception()
            if exc is not None:
                errors.append(exc)
            elif winner is None:
                winner = task
        if winner is not None:
            for loser in pending:
                _adopt(loser)
            return winner.result()
    raise AllStrategiesFailedError(errors)


async def retry(
    operation: Operation[T],
    attempts: int = 2,
    delay: float = 1.0,
    retry_on: Tuple[Type[BaseException], ...] = (Exception,),
) -> T:
    """Call ``operation`` up to ``attempts`` times, sleeping ``delay`` between tries.

    Exceptions outside ``retry_on`` propagate immediately. When every attempt
    fails the last error is re-raised.
    """
    if attempts < 1:
        raise ValueError("attempts must be at least 1")

    for attempt in range(1, attempts + 1):
        try:
            return await operation()
        except retry_on as e:
            if attempt == attempts:
                logger.warning(f"Giving up after {attempts} attempts: {e}")
                raise
            logger.info(f"Attempt {attempt}/{attempts} failed ({e}); retrying in {delay}s")
            await asyncio.sleep(delay)
    raise AssertionError("unreachable")  # pragma: no cover
