"""
CoinGecko market data service.
Provides the market list, coin detail, price history and coin search.

This module is organized into the following components:
- base: Initialization, HTTP client, cached fetch and error mapping
- markets: Ranked market list and per-coin detail
- history: Price / market cap / volume history
- search: Free-text coin search
- types: Decoded data types and supported currencies
"""

from .base import CoinGeckoBase
from .history import HistoryMixin
from .markets import MarketsMixin
from .search import SearchMixin
from .types import (
    TIME_RANGES,
    CoinDetail,
    CoinMarketData,
    PriceHistory,
    SearchResult,
    SupportedCurrency,
)


class CoinGeckoMarketDataService(
    MarketsMixin,
    HistoryMixin,
    SearchMixin,
    CoinGeckoBase,
):
    """
    Market data service using the CoinGecko v3 REST API.

    Features:
    - Market list with 7-day sparkline (/coins/markets)
    - Coin detail (/coins/{id})
    - Price history (/coins/{id}/market_chart)
    - Coin search (/search)

    Every request goes through a shared ResponseCache: responses younger
    than the TTL are served from memory and concurrent identical requests
    are coalesced into one.
    """

    pass


__all__ = [
    "CoinGeckoMarketDataService",
    "CoinDetail",
    "CoinMarketData",
    "PriceHistory",
    "SearchResult",
    "SupportedCurrency",
    "TIME_RANGES",
]
