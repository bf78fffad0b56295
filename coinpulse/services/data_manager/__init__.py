"""
Data Manager Layer - response caching for market data requests.

Usage:
    from coinpulse.services.data_manager import RequestKeys, ResponseCache

    cache = ResponseCache(ttl_ms=30_000)
    key = RequestKeys.build(base_url, "/coins/markets", {"vs_currency": "usd"})
    payload = await cache.get_or_fetch(key, fetch_func)

Key Convention:
    The key is the fully-qualified request URL with parameters sorted by name.
"""

from .cache import DEFAULT_TTL_MS, ResponseCache
from .keys import RequestKeys
from .types import CacheEntry, Clock, epoch_millis

__all__ = [
    "ResponseCache",
    "RequestKeys",
    "CacheEntry",
    "Clock",
    "epoch_millis",
    "DEFAULT_TTL_MS",
]
