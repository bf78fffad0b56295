"""
Application configuration using Pydantic Settings.

Supports hierarchical environment configuration:
- .env.base: Common non-secret defaults (committed to git)
- .env.{ENVIRONMENT}: Environment-specific overrides (gitignored)
- Environment variables: Highest priority
"""

import os
from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

# Get environment from env var, default to development
ENV = os.getenv("ENVIRONMENT", "development")


class Settings(BaseSettings):
    """Application settings with hierarchical env file support."""

    model_config = SettingsConfigDict(
        # Load base first, then environment-specific override
        env_file=[
            ".env.base",  # Common defaults (committed)
            f".env.{ENV}",  # Environment overrides (gitignored)
        ],
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    environment: Literal["development", "test", "production"] = "development"

    # Upstream market data API (CoinGecko v3)
    coingecko_base_url: str = "https://api.coingecko.com/api/v3"
    coingecko_api_key: str = ""  # Optional demo key, sent as a header

    # HTTP client
    http_timeout_seconds: float = 30.0
    http_max_connections: int = 10
    http_max_keepalive_connections: int = 5

    # Response cache
    cache_ttl_ms: int = 30_000  # Responses younger than 30s are served from memory

    # Polling and retry policy
    polling_interval_seconds: float = 30.0
    query_max_retries: int = 2  # Automatic retries after the first attempt
    query_max_backoff_seconds: float = 30.0

    # Market list defaults
    default_currency: str = "usd"
    default_per_page: int = 50

    # Search
    search_result_limit: int = 10
    search_min_query_length: int = 2

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
