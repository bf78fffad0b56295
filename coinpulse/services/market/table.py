"""
Sorting, filtering and lookup for the price table.
"""

from collections.abc import Sequence
from enum import Enum

from ..market_data.types import CoinMarketData


class SortField(str, Enum):
    """Sortable price table columns."""

    RANK = "rank"
    NAME = "name"
    PRICE = "price"
    CHANGE_24H = "change_24h"
    CHANGE_7D = "change_7d"
    MARKET_CAP = "market_cap"
    VOLUME = "volume"

    def value_of(self, coin: CoinMarketData) -> float | str | None:
        """Column value for a coin; None when the provider left it out."""
        if self is SortField.RANK:
            return coin.market_cap_rank
        if self is SortField.NAME:
            return coin.name.lower()
        if self is SortField.PRICE:
            return coin.current_price
        if self is SortField.CHANGE_24H:
            return coin.price_change_percentage_24h
        if self is SortField.CHANGE_7D:
            return coin.price_change_percentage_7d
        if self is SortField.MARKET_CAP:
            return coin.market_cap
        return coin.total_volume


def sort_coins(
    coins: Sequence[CoinMarketData],
    field: SortField | str = SortField.RANK,
    descending: bool = False,
) -> list[CoinMarketData]:
    """
    Sort coins by a table column.

    Coins missing the column value always go last, whichever the direction.
    The sort is stable, so ties keep the provider's order.
    """
    field = SortField(field)
    present = [coin for coin in coins if field.value_of(coin) is not None]
    missing = [coin for coin in coins if field.value_of(coin) is None]

    present.sort(key=field.value_of, reverse=descending)
    return present + missing


def filter_coins(
    coins: Sequence[CoinMarketData],
    query: str,
) -> list[CoinMarketData]:
    """Coins whose name or symbol contains the query, case-insensitively."""
    needle = query.strip().lower()
    if not needle:
        return list(coins)
    return [
        coin
        for coin in coins
        if needle in coin.name.lower() or needle in coin.symbol.lower()
    ]


def find_coin(
    coins: Sequence[CoinMarketData],
    coin_id: str,
) -> CoinMarketData | None:
    """Market row for a search result's coin id, if it is listed."""
    return next((coin for coin in coins if coin.id == coin_id), None)
