"""
Market list and per-asset detail methods for the CoinGecko service.
"""

import structlog

from .base import CoinGeckoBase
from .types import CoinDetail, CoinMarketData, SupportedCurrency, decode_market_list

logger = structlog.get_logger()


class MarketsMixin(CoinGeckoBase):
    """Methods for the ranked market list and coin detail lookups."""

    async def get_market_data(
        self,
        currency: SupportedCurrency | str = SupportedCurrency.USD,
        page: int = 1,
        per_page: int | None = None,
    ) -> list[CoinMarketData]:
        """
        Get market data for the top coins by market cap.

        Includes the 7-day sparkline series and the 7-day change percentage.

        Args:
            currency: Quote currency (usd, eur, ...)
            page: 1-based page number
            per_page: Coins per page (default: settings.default_per_page)

        Returns:
            List of CoinMarketData ordered by market cap, largest first

        Raises:
            ValidationError: If page or per_page is not positive
            MarketDataError: If the request fails
        """
        currency = SupportedCurrency.parse(currency)
        per_page = per_page or self.settings.default_per_page
        self._require_positive("page", page)
        self._require_positive("per_page", per_page)

        url = self.build_key(
            "/coins/markets",
            {
                "vs_currency": currency.value,
                "order": "market_cap_desc",
                "per_page": per_page,
                "page": page,
                "sparkline": True,
                "price_change_percentage": "7d",
            },
        )
        coins = await self._fetch_with_cache(url, decode_market_list)

        logger.info(
            "Market data fetched",
            currency=currency.value,
            page=page,
            coins_count=len(coins),
        )
        return coins

    async def get_coin_detail(self, coin_id: str) -> CoinDetail:
        """
        Get detail for a single coin.

        Args:
            coin_id: CoinGecko coin id (e.g., "bitcoin")

        Returns:
            CoinDetail with per-currency market data and description

        Raises:
            ValidationError: If coin_id is empty
            MarketDataError: If the request fails (404 for unknown ids)
        """
        segment = self._require_coin_id(coin_id)
        url = self.build_key(
            f"/coins/{segment}",
            {
                "localization": False,
                "tickers": False,
                "community_data": False,
                "developer_data": False,
            },
        )
        detail = await self._fetch_with_cache(url, CoinDetail.from_dict)

        logger.info("Coin detail fetched", coin_id=detail.id)
        return detail
