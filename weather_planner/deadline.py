"""Deadline object used to bound slow provider calls without cancelling them."""

from __future__ import annotations

import asyncio
import time
from typing import Awaitable, Callable, TypeVar

from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="deadline")

T = TypeVar("T")


class DeadlineExceeded(TimeoutError):
    """The deadline fired before the awaited operation finished."""


def _consume_late_outcome(task: asyncio.Future) -> None:
    """Retrieve a late task's outcome so it never surfaces as an unhandled error."""
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.debug("Operation finished after its deadline with error: %s", exc)
    else:
        logger.debug("Operation finished after its deadline; result discarded")


class Deadline:
    """
    A point in time after which callers stop waiting.

    `run` races an awaitable against the remaining time. If the deadline wins,
    the awaitable keeps running in the background and its eventual outcome is
    dropped; the caller is never held past the deadline.
    """

    def __init__(self, timeout_seconds: float, *, clock: Callable[[], float] = time.monotonic) -> None:
        self.timeout = max(0.0, float(timeout_seconds))
        self._clock = clock
        self._expires_at = clock() + self.timeout

    def remaining(self) -> float:
        """Seconds left before the deadline (never negative)."""
        return max(0.0, self._expires_at - self._clock())

    def expired(self) -> bool:
        return self.remaining() <= 0.0

    async def run(self, awaitable: Awaitable[T]) -> T:
        """Return the awaitable's result, or raise DeadlineExceeded if time runs out first."""
        task = asyncio.ensure_future(awaitable)
        done, _pending = await asyncio.wait({task}, timeout=self.remaining())
        if task in done:
            return task.result()
        task.add_done_callback(_consume_late_outcome)
        raise DeadlineExceeded(f"Deadline of {self.timeout:.2f}s exceeded")
