"""
Aggregate statistics for the market overview cards.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from ...shared.formatters import format_large_number
from ..market_data.types import CoinMarketData, SupportedCurrency


@dataclass(frozen=True)
class MarketStats:
    """Totals over the currently listed coins."""

    total_market_cap: float
    total_volume: float
    gainers: int
    coin_count: int
    gainers_percentage: int

    @property
    def is_bullish(self) -> bool:
        """More than half of the listed coins are up over 24 hours."""
        return self.gainers_percentage > 50

    def to_display(self, currency: SupportedCurrency | str) -> dict[str, Any]:
        """Formatted values for the three overview cards."""
        symbol = SupportedCurrency.parse(currency).symbol
        return {
            "total_market_cap": format_large_number(self.total_market_cap, symbol),
            "total_volume": format_large_number(self.total_volume, symbol),
            "sentiment": f"{self.gainers_percentage}%",
            "sentiment_detail": f"{self.gainers} of {self.coin_count} coins up",
            "is_bullish": self.is_bullish,
        }


def compute_market_stats(coins: Sequence[CoinMarketData]) -> MarketStats:
    """
    Summarize a market list.

    Args:
        coins: Coins as returned by get_market_data

    Returns:
        MarketStats; an empty list gives zero totals and 0% gainers
    """
    gainers = sum(1 for coin in coins if coin.price_change_percentage_24h > 0)
    gainers_percentage = round(gainers / len(coins) * 100) if coins else 0

    return MarketStats(
        total_market_cap=sum(coin.market_cap for coin in coins),
        total_volume=sum(coin.total_volume for coin in coins),
        gainers=gainers,
        coin_count=len(coins),
        gainers_percentage=gainers_percentage,
    )
