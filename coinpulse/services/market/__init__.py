"""
Market summaries and table helpers over fetched CoinMarketData.
"""

from .stats import MarketStats, compute_market_stats
from .table import SortField, filter_coins, find_coin, sort_coins

__all__ = [
    "MarketStats",
    "compute_market_stats",
    "SortField",
    "sort_coins",
    "filter_coins",
    "find_coin",
]
