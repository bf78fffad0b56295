"""
coinpulse - data layer for a live cryptocurrency market dashboard.

Fetches market data from the CoinGecko REST API through a short-lived
response cache, and turns price series into sparkline coordinates.
"""

__version__ = "0.1.0"
