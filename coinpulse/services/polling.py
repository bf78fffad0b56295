"""
Market Data Poller.

Cancellable periodic fetch task with explicit start/stop, tied to the
lifetime of whatever is observing the data (a table view, an open chart).
Fetches fire on a fixed interval regardless of how long the previous fetch
took; overlapping fetches for the same request are coalesced by the
response cache.
"""

import asyncio
import inspect
from collections.abc import Awaitable, Callable
from typing import Any, Generic, TypeVar

import structlog

from ..core.utils.retry import RetryPolicy, retry_async

logger = structlog.get_logger()

T = TypeVar("T")

DataCallback = Callable[[Any], Any]
ErrorCallback = Callable[[BaseException], Any]


async def _notify(callback: Callable[[Any], Any] | None, value: Any) -> None:
    if callback is None:
        return
    result = callback(value)
    if inspect.isawaitable(result):
        await result


class MarketDataPoller(Generic[T]):
    """Periodically refreshes one query and reports results to an observer."""

    def __init__(
        self,
        fetch_func: Callable[[], Awaitable[T]],
        interval_seconds: float = 30.0,
        on_data: DataCallback | None = None,
        on_error: ErrorCallback | None = None,
        retry_policy: RetryPolicy | None = None,
        name: str = "market_data",
    ):
        """
        Initialize the poller (does not start it).

        Args:
            fetch_func: Coroutine factory performing one query
            interval_seconds: Seconds between fetches (default 30)
            on_data: Called with each successful result (sync or async)
            on_error: Called with the final error of a failed fetch
            retry_policy: Retries per fetch (default: no retries)
            name: Identifier for log events
        """
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")

        self.fetch_func = fetch_func
        self.interval_seconds = interval_seconds
        self.on_data = on_data
        self.on_error = on_error
        self.retry_policy = retry_policy or RetryPolicy(max_retries=0)
        self.name = name

        self.latest: T | None = None
        self.last_error: BaseException | None = None
        self.fetch_count = 0
        self._task: asyncio.Task | None = None
        self._fetches: set[asyncio.Task] = set()

    @property
    def is_running(self) -> bool:
        """True between start() and stop()."""
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Start polling; the first fetch fires immediately."""
        if self.is_running:
            logger.warning("Poller already running", poller=self.name)
            return

        self._task = asyncio.create_task(self._poll_loop())
        logger.info(
            "Poller started",
            poller=self.name,
            interval_seconds=self.interval_seconds,
        )

    async def stop(self) -> None:
        """Stop polling and cancel outstanding fetches."""
        tasks = list(self._fetches)
        if self._task is not None:
            tasks.append(self._task)

        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

        self._task = None
        self._fetches.clear()
        logger.info("Poller stopped", poller=self.name, fetch_count=self.fetch_count)

    async def __aenter__(self) -> "MarketDataPoller[T]":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.stop()

    async def refresh(self) -> T:
        """
        Fetch once right now, outside the timer.

        Observers are notified as for a timed fetch; the error is also raised.
        """
        try:
            data = await retry_async(self.fetch_func, self.retry_policy, self.name)
        except Exception as e:
            await self._record_error(e)
            raise

        await self._record_data(data)
        return data

    async def _poll_loop(self) -> None:
        while True:
            # Fire and keep time; a slow fetch never delays the next tick
            fetch = asyncio.create_task(self._fetch_once())
            self._fetches.add(fetch)
            fetch.add_done_callback(self._fetches.discard)

            await asyncio.sleep(self.interval_seconds)

    async def _fetch_once(self) -> None:
        try:
            data = await retry_async(self.fetch_func, self.retry_policy, self.name)
        except Exception as e:
            # The loop must survive any fetch failure
            await self._record_error(e)
            return

        await self._record_data(data)

    async def _record_data(self, data: T) -> None:
        self.fetch_count += 1
        self.latest = data
        self.last_error = None
        logger.debug("Poller fetch succeeded", poller=self.name)
        await _notify(self.on_data, data)

    async def _record_error(self, error: Exception) -> None:
        self.last_error = error
        logger.error(
            "Poller fetch failed",
            poller=self.name,
            error=str(error),
            error_type=type(error).__name__,
        )
        await _notify(self.on_error, error)
