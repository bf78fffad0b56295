"""
Base class for the CoinGecko market data service.
Provides initialization, HTTP client management, and the cached fetch path.
"""

from collections.abc import Callable, Mapping
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any, TypeVar

import httpx
import structlog

from ...core.config import Settings
from ...core.exceptions import (
    RateLimitedError,
    RequestFailedError,
    TransportError,
    ValidationError,
)
from ..data_manager import RequestKeys, ResponseCache

logger = structlog.get_logger()

T = TypeVar("T")

API_KEY_HEADER = "x-cg-demo-api-key"


def _parse_retry_after(value: str | None, now: datetime | None = None) -> float | None:
    """
    Seconds to wait from a Retry-After header.

    Accepts delta-seconds or an HTTP-date; returns None when absent or unusable.
    """
    if not value:
        return None
    try:
        seconds = float(value)
    except ValueError:
        try:
            retry_at = parsedate_to_datetime(value)
        except (TypeError, ValueError):
            return None
        if retry_at.tzinfo is None:
            retry_at = retry_at.replace(tzinfo=timezone.utc)
        now = now or datetime.now(timezone.utc)
        return max((retry_at - now).total_seconds(), 0.0)
    return seconds if seconds >= 0 else None


class CoinGeckoBase:
    """
    Base class for CoinGecko API interactions.

    Provides:
    - HTTP client with connection pooling (owned or injected)
    - Request key construction
    - Cached, deduplicated GET with status code to error mapping
    - Resource cleanup
    """

    def __init__(
        self,
        settings: Settings,
        cache: ResponseCache | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        """Initialize service with a response cache and a persistent HTTP client.

        Args:
            settings: Application settings with API base URL and limits
            cache: Shared response cache (default: a new cache using settings TTL)
            client: Optional httpx AsyncClient, closed by its owner
        """
        self.settings = settings
        self.base_url = settings.coingecko_base_url.rstrip("/")
        self.cache = cache or ResponseCache(ttl_ms=settings.cache_ttl_ms)

        self._owns_client = client is None
        if client is None:
            headers = {"accept": "application/json"}
            if settings.coingecko_api_key:
                headers[API_KEY_HEADER] = settings.coingecko_api_key

            # Persistent HTTP client with connection pooling
            client = httpx.AsyncClient(
                timeout=settings.http_timeout_seconds,
                headers=headers,
                limits=httpx.Limits(
                    max_keepalive_connections=settings.http_max_keepalive_connections,
                    max_connections=settings.http_max_connections,
                    keepalive_expiry=30.0,
                ),
            )
        self.client = client

        logger.info(
            "CoinGecko market data service initialized",
            base_url=self.base_url,
            api_key_configured=bool(settings.coingecko_api_key),
            cache_ttl_ms=self.cache.ttl_ms,
        )

    async def close(self) -> None:
        """Close HTTP client if we own it."""
        if self._owns_client:
            await self.client.aclose()
            logger.info("CoinGecko market data service closed")

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def build_key(self, path: str, params: Mapping[str, Any] | None = None) -> str:
        """Request key (and URL) for an endpoint."""
        return RequestKeys.build(self.base_url, path, params)

    @staticmethod
    def _require_positive(name: str, value: int) -> None:
        if value < 1:
            raise ValidationError(f"{name} must be a positive integer", **{name: value})

    @staticmethod
    def _require_coin_id(coin_id: str) -> str:
        if not coin_id or not coin_id.strip():
            raise ValidationError("Coin id must not be empty")
        return RequestKeys.path_segment(coin_id)

    async def _request_json(self, url: str) -> Any:
        """
        Perform one GET and map the outcome onto the error taxonomy.

        Raises:
            RateLimitedError: On HTTP 429
            RequestFailedError: On any other non-2xx status
            TransportError: When no response arrives or the body is not JSON
        """
        try:
            response = await self.client.get(url)
        except httpx.RequestError as e:
            logger.error(
                "CoinGecko request failed without response",
                url=url,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise TransportError(
                f"Network error contacting market data API: {type(e).__name__}",
                url=url,
            ) from e

        if response.status_code == 429:
            retry_after = _parse_retry_after(response.headers.get("retry-after"))
            logger.warning(
                "CoinGecko rate limit exceeded",
                url=url,
                retry_after_seconds=retry_after,
            )
            raise RateLimitedError(retry_after_seconds=retry_after, url=url)

        if not response.is_success:
            logger.error(
                "CoinGecko API error",
                url=url,
                status_code=response.status_code,
            )
            raise RequestFailedError(response.status_code, url=url)

        try:
            return response.json()
        except ValueError as e:
            logger.error("CoinGecko returned invalid JSON", url=url, error=str(e))
            raise TransportError("Market data API returned an unreadable body", url=url) from e

    async def _fetch_with_cache(self, url: str, decoder: Callable[[Any], T]) -> T:
        """
        Return the decoded body for a request key, using the cache.

        The raw JSON payload is cached; ``decoder`` runs on every return so
        callers always get fresh objects. A body that does not decode is
        never stored.

        Args:
            url: Request key built by build_key
            decoder: Turns the JSON payload into the caller's type

        Returns:
            Decoded payload

        Raises:
            TransportError: When the body does not have the expected shape
        """

        async def fetch_and_validate() -> Any:
            payload = await self._request_json(url)
            self._decode(url, payload, decoder)
            return payload

        payload = await self.cache.get_or_fetch(url, fetch_and_validate)
        return self._decode(url, payload, decoder)

    @staticmethod
    def _decode(url: str, payload: Any, decoder: Callable[[Any], T]) -> T:
        try:
            return decoder(payload)
        except (KeyError, TypeError, AttributeError, ValueError) as e:
            logger.error(
                "CoinGecko returned an unexpected body",
                url=url,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise TransportError(
                "Market data API returned an unreadable body", url=url
            ) from e
