"""Settle-all join for concurrent awaitables.

asyncio.gather() without return_exceptions propagates the first failure
while the other tasks keep running unobserved. settle_all() catches each
task's exception independently so every task runs to completion and the
caller sees one outcome per awaitable, in input order.
"""

import asyncio
from collections.abc import Awaitable, Iterable
from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Settled(Generic[T]):
    """Outcome of one awaitable: either a value or the exception it raised."""

    value: T | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


async def _settle(awaitable: Awaitable[T], semaphore: asyncio.Semaphore | None) -> Settled[T]:
    try:
        if semaphore is None:
            return Settled(value=await awaitable)
        async with semaphore:
            return Settled(value=await awaitable)
    except Exception as exc:
        return Settled(error=exc)


async def settle_all(
    awaitables: Iterable[Awaitable[T]], limit: int | None = None
) -> list[Settled[T]]:
    """Run awaitables concurrently and wait for all of them.

    Exceptions are captured per awaitable; siblings are never cancelled.
    Cancellation of the caller (CancelledError) still propagates.

    Args:
        awaitables: Coroutines or futures to join.
        limit: At most this many run at the same time (unbounded when None).
    """
    if limit is not None and limit < 1:
        raise ValueError(f"limit must be >= 1, got: {limit}")
    semaphore = asyncio.Semaphore(limit) if limit else None
    return list(await asyncio.gather(*(_settle(aw, semaphore) for aw in awaitables)))
