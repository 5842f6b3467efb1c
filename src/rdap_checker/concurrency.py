"""
Bounded-concurrency execution of async workers.

Two modes share the same admission control: at most ``concurrency`` items
are in flight, and a new item is admitted as soon as one finishes.

- Batch mode (``run_batch``) returns one entry per input, in input order.
- Streaming mode (``run_streaming``) hands each success to a callback as
  it completes and reports skipped items as Failure outcomes.

Worker exceptions never escape either mode; they are captured per item.
"""

import asyncio
import inspect
from contextlib import aclosing
from dataclasses import dataclass
from typing import (
    Any,
    AsyncIterator,
    Awaitable,
    Callable,
    Generic,
    Iterable,
    TypeVar,
    Union,
)


T = TypeVar("T")
R = TypeVar("R")

Worker = Callable[[T], Awaitable[R]]


@dataclass(frozen=True)
class Success(Generic[T, R]):
    """A worker call that returned a value."""

    index: int
    item: T
    value: R

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Failure(Generic[T]):
    """A worker call that raised."""

    index: int
    item: T
    error: BaseException

    @property
    def ok(self) -> bool:
        return False


Outcome = Union[Success[T, R], Failure[T]]


def _clamp(concurrency: int) -> int:
    return max(1, concurrency)


async def _settle(index: int, item: T, worker: Worker) -> Outcome:
    # CancelledError is not an Exception subclass and propagates
    try:
        value = await worker(item)
    except Exception as e:
        return Failure(index=index, item=item, error=e)
    return Success(index=index, item=item, value=value)


async def stream_outcomes(
    items: Iterable[T],
    concurrency: int,
    worker: Worker,
) -> AsyncIterator[Outcome]:
    """
    Run ``worker`` over ``items`` and yield outcomes as they complete.

    Items are admitted in input order. Tasks still in flight when the
    consumer stops iterating are cancelled.

    Args:
        items: Inputs to process
        concurrency: Maximum number of in-flight workers (values < 1 mean 1)
        worker: Async callable applied to each item

    Yields:
        Success or Failure for each item, in completion order
    """
    limit = _clamp(concurrency)
    queued = iter(enumerate(items))
    in_flight: set[asyncio.Task] = set()

    def admit() -> None:
        while len(in_flight) < limit:
            next_item = next(queued, None)
            if next_item is None:
                return
            index, item = next_item
            in_flight.add(asyncio.ensure_future(_settle(index, item, worker)))

    try:
        admit()
        while in_flight:
            done, _ = await asyncio.wait(in_flight, return_when=asyncio.FIRST_COMPLETED)
            in_flight.difference_update(done)
            admit()

            for outcome in sorted((task.result() for task in done), key=lambda o: o.index):
                yield outcome
    finally:
        for task in in_flight:
            task.cancel()


async def run_batch(
    items: Iterable[T],
    concurrency: int,
    worker: Worker,
) -> list[Union[R, Failure[T]]]:
    """
    Run ``worker`` over ``items`` and collect results in input order.

    Args:
        items: Inputs to process
        concurrency: Maximum number of in-flight workers (values < 1 mean 1)
        worker: Async callable applied to each item

    Returns:
        List with ``len(items)`` entries; entry ``i`` is the value returned
        for ``items[i]``, or a Failure if that call raised
    """
    items = list(items)
    if not items:
        return []

    if _clamp(concurrency) >= len(items):
        outcomes = list(await asyncio.gather(
            *(_settle(index, item, worker) for index, item in enumerate(items))
        ))
    else:
        outcomes = [None] * len(items)
        async for outcome in stream_outcomes(items, concurrency, worker):
            outcomes[outcome.index] = outcome

    return [outcome.value if outcome.ok else outcome for outcome in outcomes]


async def run_streaming(
    items: Iterable[T],
    concurrency: int,
    worker: Worker,
    on_result: Callable[[R, T], Any],
) -> list[Failure[T]]:
    """
    Run ``worker`` over ``items``, delivering each result as it completes.

    Failed items are skipped: ``on_result`` only ever sees successes.
    ``on_result`` may be a plain function or a coroutine function.

    Args:
        items: Inputs to process
        concurrency: Maximum number of in-flight workers (values < 1 mean 1)
        worker: Async callable applied to each item
        on_result: Called as ``on_result(value, item)`` for each success

    Returns:
        Failure outcomes for the skipped items (empty when all succeeded)

    Raises:
        Whatever ``on_result`` raises; workers still in flight are
        cancelled first
    """
    failures: list[Failure[T]] = []

    async with aclosing(stream_outcomes(items, concurrency, worker)) as outcomes:
        async for outcome in outcomes:
            if not outcome.ok:
                failures.append(outcome)
                continue
            delivered = on_result(outcome.value, outcome.item)
            if inspect.isawaitable(delivered):
                await delivered

    return failures
