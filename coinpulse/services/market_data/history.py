"""
Historical price series methods for the CoinGecko service.
"""

import structlog

from .base import CoinGeckoBase
from .types import PriceHistory, SupportedCurrency

logger = structlog.get_logger()


class HistoryMixin(CoinGeckoBase):
    """Methods for price, market cap and volume history."""

    async def get_price_history(
        self,
        coin_id: str,
        currency: SupportedCurrency | str = SupportedCurrency.USD,
        days: int = 7,
    ) -> PriceHistory:
        """
        Get price, market cap and volume history for a coin.

        Args:
            coin_id: CoinGecko coin id (e.g., "ethereum")
            currency: Quote currency
            days: Days of history (see TIME_RANGES for the chart presets)

        Returns:
            PriceHistory with ascending (timestamp_ms, value) series

        Raises:
            ValidationError: If coin_id is empty or days is not positive
            MarketDataError: If the request fails
        """
        currency = SupportedCurrency.parse(currency)
        segment = self._require_coin_id(coin_id)
        self._require_positive("days", days)

        url = self.build_key(
            f"/coins/{segment}/market_chart",
            {"vs_currency": currency.value, "days": days},
        )
        history = await self._fetch_with_cache(url, PriceHistory.from_dict)

        logger.info(
            "Price history fetched",
            coin_id=coin_id,
            currency=currency.value,
            days=days,
            points=len(history.prices),
        )
        return history
