"""Retry utilities with exponential backoff for provider calls."""

from __future__ import annotations

import asyncio
import inspect
import math
from dataclasses import dataclass, field
from functools import wraps
from typing import Any, Awaitable, Callable, Optional, TypeVar

from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="retry")

T = TypeVar("T")


def _always_retry(_error: BaseException, _attempt: int) -> bool:
    return True


@dataclass(frozen=True)
class RetryPolicy:
    """
    Backoff settings for `execute`.

    Attributes:
        max_attempts: Total attempts including the first (values below 1 act as 1).
        initial_delay_ms: Wait before the second attempt.
        backoff_factor: Multiplier applied to the delay after each failure.
        max_delay_ms: Optional cap applied to each individual wait.
        should_retry: Predicate `(error, attempt) -> bool`; False stops immediately.
    """
    max_attempts: int = 5
    initial_delay_ms: int = 200
    backoff_factor: float = 2.0
    max_delay_ms: Optional[int] = None
    should_retry: Callable[[BaseException, int], bool] = field(default=_always_retry)

    @classmethod
    def from_settings(cls, settings, *, should_retry: Callable[[BaseException, int], bool] | None = None) -> "RetryPolicy":
        """Build a policy from application settings."""
        return cls(
            max_attempts=settings.retry_max_attempts,
            initial_delay_ms=settings.retry_initial_delay_ms,
            backoff_factor=settings.retry_backoff_factor,
            max_delay_ms=settings.retry_max_delay_ms,
            should_retry=should_retry or _always_retry,
        )

    def wait_ms(self, delay_ms: int) -> int:
        """Wait actually applied for the current delay, honoring the cap."""
        if self.max_delay_ms is None:
            return delay_ms
        return min(delay_ms, self.max_delay_ms)

    def next_delay_ms(self, delay_ms: int) -> int:
        """Delay for the following attempt: multiplied, floored, never negative."""
        return max(0, math.floor(delay_ms * self.backoff_factor))


DEFAULT_POLICY = RetryPolicy()


async def execute(
    action: Callable[[int], Awaitable[T] | T],
    policy: RetryPolicy = DEFAULT_POLICY,
    *,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
) -> T:
    """
    Run `action(attempt)` until it succeeds or the policy gives up.

    Attempts are 1-indexed. When an attempt fails and either the attempt budget
    is spent or `should_retry` declines, the error propagates at once with no
    further wait. Otherwise the executor sleeps for the (capped) delay and
    multiplies the delay by the backoff factor.

    Args:
        action: Callable receiving the attempt number; may be sync or async.
        policy: Backoff configuration.
        sleep: Awaitable sleep taking seconds; injectable for tests.

    Returns:
        The first successful result.

    Raises:
        The last error raised by `action`.
    """
    total_attempts = max(1, policy.max_attempts)
    delay_ms = policy.initial_delay_ms
    attempt = 0

    while True:
        attempt += 1
        try:
            result = action(attempt)
            if inspect.isawaitable(result):
                result = await result
            return result
        except Exception as exc:
            if attempt >= total_attempts:
                logger.warning("All %d attempts failed. Last error: %s", attempt, exc)
                raise
            if not policy.should_retry(exc, attempt):
                logger.debug("Attempt %d failed with non-retryable error: %s", attempt, exc)
                raise

            to_wait = policy.wait_ms(delay_ms)
            logger.info(
                "Attempt %d/%d failed: %s. Retrying in %dms...",
                attempt,
                total_attempts,
                exc,
                to_wait,
            )
            if to_wait > 0:
                await sleep(to_wait / 1000.0)
            delay_ms = policy.next_delay_ms(delay_ms)


def retrying(
    fn: Callable[..., Awaitable[T] | T],
    policy: RetryPolicy = DEFAULT_POLICY,
    *,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
) -> Callable[..., Awaitable[T]]:
    """
    Wrap `fn` so every call runs through `execute`.

    The wrapper keeps `fn`'s name, which the TTL cache uses to derive keys.

    Usage:
        fetch = retrying(provider.daily_range, RetryPolicy(max_attempts=3))
        series = await fetch(coords, start, end)
    """
    @wraps(fn)
    async def wrapper(*args, **kwargs):
        return await execute(lambda _attempt: fn(*args, **kwargs), policy, sleep=sleep)

    return wrapper
