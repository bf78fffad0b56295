"""
Free-text coin search for the CoinGecko service.
"""

from typing import Any

import structlog

from .base import CoinGeckoBase
from .types import SearchResult

logger = structlog.get_logger()


class SearchMixin(CoinGeckoBase):
    """Methods for coin search."""

    async def search_coins(self, query: str) -> list[SearchResult]:
        """
        Search coins by name or symbol.

        Args:
            query: Free-text query; blank queries return no results

        Returns:
            Up to settings.search_result_limit candidate matches
        """
        query = query.strip()
        if not query:
            return []

        limit = self.settings.search_result_limit

        def decode(payload: Any) -> list[SearchResult]:
            coins = (payload or {}).get("coins") or []
            return [SearchResult.from_dict(coin) for coin in coins[:limit]]

        url = self.build_key("/search", {"query": query})
        results = await self._fetch_with_cache(url, decode)

        logger.info("Coin search completed", query=query, results_count=len(results))
        return results
