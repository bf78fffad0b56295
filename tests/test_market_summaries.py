"""
Unit tests for market statistics and price table helpers.
"""

import pytest

from coinpulse.services.market import (
    SortField,
    compute_market_stats,
    filter_coins,
    find_coin,
    sort_coins,
)
from coinpulse.services.market_data import CoinMarketData

# ===== Fixtures =====


def make_coin(coin_id, name, symbol, price, cap, volume, change_24h, rank=None, change_7d=None):
    return CoinMarketData(
        id=coin_id,
        symbol=symbol,
        name=name,
        image="",
        current_price=price,
        market_cap=cap,
        market_cap_rank=rank,
        total_volume=volume,
        price_change_percentage_24h=change_24h,
        price_change_percentage_7d=change_7d,
    )


@pytest.fixture
def coins():
    """Three coins in provider (market cap) order"""
    return [
        make_coin("bitcoin", "Bitcoin", "btc", 43000.0, 8.4e11, 2.1e10, 2.0, 1, 5.0),
        make_coin("ethereum", "Ethereum", "eth", 2300.0, 2.7e11, 9.0e9, -1.5, 2, None),
        make_coin("wrapped-bitcoin", "Wrapped Bitcoin", "wbtc", 42900.0, 6.0e9, 2.0e8, 0.0, None, -2.0),
    ]


# ===== Market Stats =====


class TestMarketStats:
    """Test overview statistics"""

    def test_totals(self, coins):
        """Market cap and volume are summed"""
        stats = compute_market_stats(coins)

        assert stats.total_market_cap == pytest.approx(1.116e12)
        assert stats.total_volume == pytest.approx(3.02e10)
        assert stats.coin_count == 3

    def test_gainers_strictly_positive(self, coins):
        """Unchanged coins are not gainers"""
        stats = compute_market_stats(coins)

        assert stats.gainers == 1
        assert stats.gainers_percentage == 33
        assert stats.is_bullish is False

    def test_bullish_above_half(self, coins):
        """More than 50% up is bullish"""
        stats = compute_market_stats(coins[:1])

        assert stats.gainers_percentage == 100
        assert stats.is_bullish is True

    def test_empty_list(self):
        """No coins, no division by zero"""
        stats = compute_market_stats([])

        assert stats.total_market_cap == 0
        assert stats.gainers_percentage == 0
        assert stats.is_bullish is False

    def test_display_values(self, coins):
        """Display strings use the currency symbol"""
        display = compute_market_stats(coins).to_display("usd")

        assert display["total_market_cap"] == "$1.12T"
        assert display["total_volume"] == "$30.20B"
        assert display["sentiment"] == "33%"
        assert display["sentiment_detail"] == "1 of 3 coins up"


# ===== Table Helpers =====


class TestSortCoins:
    """Test table sorting"""

    def test_sort_by_price_descending(self, coins):
        """Highest price first"""
        ids = [c.id for c in sort_coins(coins, SortField.PRICE, descending=True)]

        assert ids == ["bitcoin", "wrapped-bitcoin", "ethereum"]

    def test_sort_by_name(self, coins):
        """Names sort case-insensitively"""
        ids = [c.id for c in sort_coins(coins, "name")]

        assert ids == ["bitcoin", "ethereum", "wrapped-bitcoin"]

    def test_missing_values_last_in_both_directions(self, coins):
        """Coins without the column value trail the list"""
        ascending = [c.id for c in sort_coins(coins, SortField.CHANGE_7D)]
        descending = [c.id for c in sort_coins(coins, SortField.CHANGE_7D, descending=True)]

        assert ascending == ["wrapped-bitcoin", "bitcoin", "ethereum"]
        assert descending == ["bitcoin", "wrapped-bitcoin", "ethereum"]

    def test_sort_by_rank_puts_unranked_last(self, coins):
        """Unranked coins follow ranked ones"""
        ids = [c.id for c in sort_coins(coins)]

        assert ids == ["bitcoin", "ethereum", "wrapped-bitcoin"]

    def test_input_not_mutated(self, coins):
        """Sorting returns a new list"""
        original = list(coins)
        sort_coins(coins, SortField.VOLUME)

        assert coins == original


class TestFilterCoins:
    """Test table filtering"""

    def test_matches_name_or_symbol(self, coins):
        """Substring match on name or symbol"""
        assert [c.id for c in filter_coins(coins, "BTC")] == ["bitcoin", "wrapped-bitcoin"]
        assert [c.id for c in filter_coins(coins, "ether")] == ["ethereum"]

    def test_blank_query_returns_all(self, coins):
        """Nothing typed, nothing filtered"""
        assert filter_coins(coins, "  ") == coins


class TestFindCoin:
    """Test lookup of a search result in the market list"""

    def test_found(self, coins):
        """Listed coins are returned"""
        assert find_coin(coins, "ethereum").name == "Ethereum"

    def test_not_listed(self, coins):
        """Unlisted ids give None"""
        assert find_coin(coins, "dogecoin") is None
