"""
Request key generation for the response cache.

The cache key is the fully-qualified request URL, and it is also the URL that
is actually requested. Logically-equivalent requests must produce the same
key, so parameters are normalized before encoding:
- parameters whose value is None are dropped
- remaining parameters are sorted by name
- booleans render as "true"/"false"
- values are percent-encoded (spaces as %20)
"""

from collections.abc import Mapping
from typing import Any
from urllib.parse import quote, urlencode, urlsplit


class RequestKeys:
    """
    Request key generators for consistent cache identity.

    Examples:
        https://api.coingecko.com/api/v3/coins/markets?page=1&vs_currency=usd
        https://api.coingecko.com/api/v3/search?query=bit%20coin
    """

    @staticmethod
    def _normalize_value(value: Any) -> str:
        if isinstance(value, bool):
            return "true" if value else "false"
        return str(value)

    @staticmethod
    def build(
        base_url: str,
        path: str,
        params: Mapping[str, Any] | None = None,
    ) -> str:
        """
        Build the canonical request URL.

        Args:
            base_url: API root (e.g., 'https://api.coingecko.com/api/v3')
            path: Endpoint path (e.g., '/coins/markets')
            params: Query parameters; None values are omitted

        Returns:
            URL like 'https://api.coingecko.com/api/v3/coins/markets?page=1&vs_currency=usd'
        """
        url = f"{base_url.rstrip('/')}/{path.lstrip('/')}"

        items = sorted(
            (name, RequestKeys._normalize_value(value))
            for name, value in (params or {}).items()
            if value is not None
        )
        if not items:
            return url

        return f"{url}?{urlencode(items, quote_via=quote)}"

    @staticmethod
    def path_segment(value: str) -> str:
        """Percent-encode a single path segment (e.g., a coin id)."""
        return quote(value.strip(), safe="")

    @staticmethod
    def parse(key: str) -> dict[str, str]:
        """
        Split a request key into its components.

        Args:
            key: Request key to parse

        Returns:
            Dict with host, path and query
        """
        parts = urlsplit(key)
        return {
            "host": parts.netloc,
            "path": parts.path,
            "query": parts.query,
        }
