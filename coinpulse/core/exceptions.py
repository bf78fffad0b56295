"""
Custom exception hierarchy for market data access.

Every error raised by the fetch layer is one of three kinds, so callers can
decide on a retry policy without inspecting transport details:
- RateLimitedError: upstream answered 429, back off and retry later
- RequestFailedError: any other non-success status, carries the status code
- TransportError: no usable response (DNS, connect, timeout, unreadable body)

Usage:
    from coinpulse.core.exceptions import RateLimitedError, MarketDataError

    try:
        coins = await service.get_market_data("usd")
    except RateLimitedError as e:
        await asyncio.sleep(e.retry_after_seconds or 5)
    except MarketDataError as e:
        logger.error("Market data unavailable", **e.to_dict())
"""

from typing import Any


class AppError(Exception):
    """
    Base application error with HTTP status mapping.

    All custom exceptions inherit from this to enable consistent error handling.
    """

    # Default status code (subclasses override)
    status_code: int = 500
    error_type: str = "internal_error"

    def __init__(self, message: str, **context: Any):
        """
        Initialize error with message and optional context.

        Args:
            message: Human-readable error description
            **context: Additional key-value pairs for logging (e.g., url, coin_id)
        """
        super().__init__(message)
        self.message = message
        self.context = context

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for structured logging."""
        return {
            "error_type": self.error_type,
            "message": self.message,
            "status_code": self.status_code,
            **self.context,
        }


# ===== Caller Errors =====


class ValidationError(AppError):
    """Caller provided invalid input (e.g., page 0, empty coin id)."""

    status_code = 400
    error_type = "validation_error"


class ConfigurationError(AppError):
    """
    Application misconfigured (e.g., invalid base URL, non-positive TTL).

    Should be caught during startup, not during a fetch.
    """

    status_code = 500
    error_type = "configuration_error"


# ===== Upstream Market Data Errors =====


class MarketDataError(AppError):
    """
    Market data provider unavailable or returned an error.

    Base class for the three fetch failure kinds. Maps to 503 Service
    Unavailable (third-party problem, retry may help).
    """

    status_code = 503
    error_type = "market_data_error"


class RateLimitedError(MarketDataError):
    """
    Upstream rejected the request with HTTP 429.

    Recoverable: the caller should wait and retry. ``retry_after_seconds`` is
    set when the provider sent a usable Retry-After header.
    """

    status_code = 429
    error_type = "rate_limited"

    def __init__(
        self,
        message: str = "Rate limit exceeded. Please wait a moment.",
        retry_after_seconds: float | None = None,
        **context: Any,
    ):
        super().__init__(message, retry_after_seconds=retry_after_seconds, **context)
        self.retry_after_seconds = retry_after_seconds


class RequestFailedError(MarketDataError):
    """
    Upstream answered with a non-success status other than 429.

    ``status_code`` is the upstream HTTP status, so 4xx responses (unknown
    coin id) and 5xx responses (provider outage) can be told apart.
    """

    error_type = "request_failed"

    def __init__(self, status_code: int, message: str | None = None, **context: Any):
        super().__init__(message or f"API error: {status_code}", **context)
        self.status_code = status_code

    @property
    def is_server_error(self) -> bool:
        """True for 5xx statuses, which are usually transient."""
        return 500 <= self.status_code < 600


class TransportError(MarketDataError):
    """No usable response: network, DNS, timeout or an unreadable body."""

    error_type = "transport_error"
