"""
Market Queries - the dashboard's data-fetching policy.

Sits between the presentation layer and CoinGeckoMarketDataService:
- automatic retries for market list and price history (2 by default)
- enable rules: no history without a coin, no search under 2 characters
- pollers that refresh a query every 30 seconds while it is observed

Usage:
    queries = MarketQueries(service, settings)
    poller = await queries.watch_market_data("usd", on_data=render_table)
    ...
    await poller.stop()
"""

import structlog

from ..core.config import Settings
from ..core.utils.retry import RetryPolicy, retry_async
from .market_data import (
    CoinGeckoMarketDataService,
    CoinMarketData,
    PriceHistory,
    SearchResult,
    SupportedCurrency,
)
from .polling import DataCallback, ErrorCallback, MarketDataPoller

logger = structlog.get_logger()


class MarketQueries:
    """Query entry points used by the dashboard views."""

    def __init__(
        self,
        service: CoinGeckoMarketDataService,
        settings: Settings,
        retry_policy: RetryPolicy | None = None,
    ):
        """
        Initialize queries over a market data service.

        Args:
            service: Shared market data service (and its cache)
            settings: Polling, retry and search settings
            retry_policy: Override for the market/history retry policy
        """
        self.service = service
        self.settings = settings
        self.retry_policy = retry_policy or RetryPolicy(
            max_retries=settings.query_max_retries,
            max_backoff_seconds=settings.query_max_backoff_seconds,
        )

    async def market_data(
        self,
        currency: SupportedCurrency | str = SupportedCurrency.USD,
        page: int = 1,
    ) -> list[CoinMarketData]:
        """Market list with retries."""
        return await retry_async(
            lambda: self.service.get_market_data(currency, page),
            self.retry_policy,
            operation="market_data",
        )

    async def price_history(
        self,
        coin_id: str | None,
        currency: SupportedCurrency | str = SupportedCurrency.USD,
        days: int = 7,
    ) -> PriceHistory | None:
        """Price history with retries; None while no coin is selected."""
        if not coin_id:
            return None
        return await retry_async(
            lambda: self.service.get_price_history(coin_id, currency, days),
            self.retry_policy,
            operation="price_history",
        )

    async def search(self, query: str) -> list[SearchResult]:
        """Coin search; disabled for queries shorter than the minimum length."""
        query = query.strip()
        if len(query) < self.settings.search_min_query_length:
            return []
        return await self.service.search_coins(query)

    async def watch_market_data(
        self,
        currency: SupportedCurrency | str = SupportedCurrency.USD,
        page: int = 1,
        on_data: DataCallback | None = None,
        on_error: ErrorCallback | None = None,
    ) -> MarketDataPoller[list[CoinMarketData]]:
        """
        Start polling the market list.

        Returns:
            Running poller; the caller stops it when the view goes away
        """
        currency = SupportedCurrency.parse(currency)
        poller = MarketDataPoller(
            lambda: self.service.get_market_data(currency, page),
            interval_seconds=self.settings.polling_interval_seconds,
            on_data=on_data,
            on_error=on_error,
            retry_policy=self.retry_policy,
            name=f"market_data:{currency.value}:{page}",
        )
        await poller.start()
        return poller

    async def watch_price_history(
        self,
        coin_id: str | None,
        currency: SupportedCurrency | str = SupportedCurrency.USD,
        days: int = 7,
        on_data: DataCallback | None = None,
        on_error: ErrorCallback | None = None,
    ) -> MarketDataPoller[PriceHistory] | None:
        """
        Start polling a coin's price history.

        Returns:
            Running poller, or None when no coin is selected
        """
        if not coin_id:
            logger.debug("Price history watch skipped, no coin selected")
            return None

        currency = SupportedCurrency.parse(currency)
        poller = MarketDataPoller(
            lambda: self.service.get_price_history(coin_id, currency, days),
            interval_seconds=self.settings.polling_interval_seconds,
            on_data=on_data,
            on_error=on_error,
            retry_policy=self.retry_policy,
            name=f"price_history:{coin_id}:{currency.value}:{days}",
        )
        await poller.start()
        return poller
