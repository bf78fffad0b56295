"""
Caller-side retry policy for market data queries.

The fetch layer never retries on its own; it surfaces RateLimitedError,
RequestFailedError or TransportError and leaves the decision to the caller.
This module is that caller policy: a bounded number of automatic retries
with exponential backoff (via tenacity), after which the last error is raised.

Usage:
    policy = RetryPolicy(max_retries=2)
    coins = await retry_async(lambda: service.get_market_data("usd"), policy)
"""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TypeVar

import structlog
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ..exceptions import MarketDataError, RateLimitedError

logger = structlog.get_logger()

T = TypeVar("T")


@dataclass
class RetryPolicy:
    """
    How many times to retry a failed query and how long to wait in between.

    Args:
        max_retries: Automatic retries after the first attempt (0 disables)
        max_backoff_seconds: Upper bound for a single wait
        backoff: Delay function taking the zero-based retry attempt
            (default: 1s, 2s, 4s, ... exponential)
        retry_on: Exception types worth retrying
        sleep: Awaitable sleep, swapped out in tests
    """

    max_retries: int = 2
    max_backoff_seconds: float = 30.0
    backoff: Callable[[int], float] | None = None
    retry_on: tuple[type[BaseException], ...] = (MarketDataError,)
    sleep: Callable[[float], Awaitable[None]] = field(default=asyncio.sleep)

    def wait(self, retry_state: RetryCallState) -> float:
        """tenacity wait strategy: backoff, or a longer Retry-After."""
        if self.backoff is not None:
            delay = self.backoff(retry_state.attempt_number - 1)
        else:
            delay = wait_exponential(multiplier=1, max=self.max_backoff_seconds)(
                retry_state
            )

        error = retry_state.outcome.exception() if retry_state.outcome else None
        if isinstance(error, RateLimitedError) and error.retry_after_seconds:
            delay = max(delay, error.retry_after_seconds)

        return min(delay, self.max_backoff_seconds)

    def retrying(self, operation: str = "query") -> AsyncRetrying:
        """Build the tenacity controller for one query call."""

        def log_retry(retry_state: RetryCallState) -> None:
            error = retry_state.outcome.exception()
            logger.warning(
                "Query failed, retrying",
                operation=operation,
                attempt=retry_state.attempt_number,
                max_retries=self.max_retries,
                delay_seconds=retry_state.next_action.sleep,
                error=str(error),
                error_type=type(error).__name__,
            )

        return AsyncRetrying(
            stop=stop_after_attempt(self.max_retries + 1),
            wait=self.wait,
            retry=retry_if_exception_type(self.retry_on),
            before_sleep=log_retry,
            sleep=self.sleep,
            reraise=True,
        )


async def retry_async(
    func: Callable[[], Awaitable[T]],
    policy: RetryPolicy | None = None,
    operation: str = "query",
) -> T:
    """
    Await ``func()`` and retry it according to ``policy``.

    Args:
        func: Zero-argument coroutine factory, called once per attempt
        policy: Retry policy (default: 2 retries, exponential backoff)
        operation: Name used in log events

    Returns:
        The first successful result

    Raises:
        The last error once retries are exhausted, or immediately for
        exception types outside ``policy.retry_on``
    """
    policy = policy or RetryPolicy()
    attempts = 0

    try:
        async for attempt in policy.retrying(operation):
            with attempt:
                attempts = attempt.retry_state.attempt_number
                result = await func()
    except policy.retry_on as e:
        logger.error(
            "Query failed after retries",
            operation=operation,
            attempts=attempts,
            error=str(e),
            error_type=type(e).__name__,
        )
        raise

    return result
