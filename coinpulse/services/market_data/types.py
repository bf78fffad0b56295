"""
Data types for the CoinGecko market data service.

These models define the structure of data returned to the dashboard,
decoded from the provider's JSON payloads.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import pandas as pd

from ...core.exceptions import ValidationError
from ...shared.formatters import safe_float, safe_int

# Chart time ranges offered by the price history view (label -> days)
TIME_RANGES: dict[str, int] = {
    "24H": 1,
    "7D": 7,
    "30D": 30,
    "90D": 90,
}


class SupportedCurrency(str, Enum):
    """Quote currencies supported by the dashboard."""

    USD = "usd"
    EUR = "eur"
    GBP = "gbp"
    JPY = "jpy"
    AUD = "aud"
    CAD = "cad"
    CHF = "chf"
    CNY = "cny"

    @classmethod
    def parse(cls, value: "SupportedCurrency | str") -> "SupportedCurrency":
        """
        Accept an enum member or a case-insensitive currency code.

        Raises:
            ValidationError: If the currency is not supported
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError as e:
            raise ValidationError(
                f"Unsupported currency: {value}", currency=str(value)
            ) from e

    @property
    def symbol(self) -> str:
        """Display symbol for prices in this currency."""
        symbol_map = {
            SupportedCurrency.USD: "$",
            SupportedCurrency.EUR: "€",
            SupportedCurrency.GBP: "£",
            SupportedCurrency.JPY: "¥",
            SupportedCurrency.AUD: "A$",
            SupportedCurrency.CAD: "C$",
            SupportedCurrency.CHF: "CHF",
            SupportedCurrency.CNY: "¥",
        }
        return symbol_map[self]

    @property
    def display_name(self) -> str:
        """Human-readable currency name."""
        name_map = {
            SupportedCurrency.USD: "US Dollar",
            SupportedCurrency.EUR: "Euro",
            SupportedCurrency.GBP: "British Pound",
            SupportedCurrency.JPY: "Japanese Yen",
            SupportedCurrency.AUD: "Australian Dollar",
            SupportedCurrency.CAD: "Canadian Dollar",
            SupportedCurrency.CHF: "Swiss Franc",
            SupportedCurrency.CNY: "Chinese Yuan",
        }
        return name_map[self]


def _optional_float(value: Any) -> float | None:
    if value is None:
        return None
    return safe_float(value)


def _series(points: Any) -> list[tuple[int, float]]:
    """Decode [[timestamp_ms, value], ...] pairs, skipping malformed rows."""
    series = []
    for point in points or []:
        if not isinstance(point, list | tuple) or len(point) < 2:
            continue
        series.append((safe_int(point[0]), safe_float(point[1])))
    return series


@dataclass(frozen=True)
class CoinMarketData:
    """Snapshot of one asset's market metrics at fetch time."""

    id: str
    symbol: str
    name: str
    image: str
    current_price: float
    market_cap: float
    market_cap_rank: int | None
    total_volume: float
    price_change_percentage_24h: float
    price_change_percentage_7d: float | None = None
    sparkline_7d: tuple[float, ...] = ()
    last_updated: str = ""

    @property
    def is_positive_24h(self) -> bool:
        """True when the price rose (or held) over the last 24 hours."""
        return self.price_change_percentage_24h >= 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary in the provider's field naming."""
        return {
            "id": self.id,
            "symbol": self.symbol,
            "name": self.name,
            "image": self.image,
            "current_price": self.current_price,
            "market_cap": self.market_cap,
            "market_cap_rank": self.market_cap_rank,
            "total_volume": self.total_volume,
            "price_change_percentage_24h": self.price_change_percentage_24h,
            "price_change_percentage_7d_in_currency": self.price_change_percentage_7d,
            "sparkline_in_7d": {"price": list(self.sparkline_7d)},
            "last_updated": self.last_updated,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CoinMarketData":
        """Create from a /coins/markets row."""
        sparkline = data.get("sparkline_in_7d") or {}
        rank = data.get("market_cap_rank")
        return cls(
            id=data["id"],
            symbol=data.get("symbol", ""),
            name=data.get("name", ""),
            image=data.get("image") or "",
            current_price=safe_float(data.get("current_price")),
            market_cap=safe_float(data.get("market_cap")),
            market_cap_rank=safe_int(rank) if rank is not None else None,
            total_volume=safe_float(data.get("total_volume")),
            price_change_percentage_24h=safe_float(
                data.get("price_change_percentage_24h")
            ),
            price_change_percentage_7d=_optional_float(
                data.get("price_change_percentage_7d_in_currency")
            ),
            sparkline_7d=tuple(safe_float(p) for p in sparkline.get("price") or []),
            last_updated=data.get("last_updated") or "",
        )


def decode_market_list(payload: Any) -> list[CoinMarketData]:
    """Decode a /coins/markets response body."""
    return [CoinMarketData.from_dict(row) for row in payload or []]


@dataclass(frozen=True)
class CoinDetail:
    """Per-asset detail from /coins/{id}."""

    id: str
    symbol: str
    name: str
    image_large: str = ""
    image_small: str = ""
    image_thumb: str = ""
    current_price: dict[str, float] = field(default_factory=dict)
    market_cap: dict[str, float] = field(default_factory=dict)
    total_volume: dict[str, float] = field(default_factory=dict)
    price_change_percentage_24h: float = 0.0
    price_change_percentage_7d: float = 0.0
    price_change_percentage_30d: float = 0.0
    description: str = ""

    def price_in(self, currency: SupportedCurrency | str) -> float | None:
        """Current price in the given currency, if the provider quoted it."""
        return self.current_price.get(SupportedCurrency.parse(currency).value)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CoinDetail":
        """Create from a /coins/{id} response body."""
        image = data.get("image") or {}
        market = data.get("market_data") or {}

        def per_currency(name: str) -> dict[str, float]:
            return {k: safe_float(v) for k, v in (market.get(name) or {}).items()}

        return cls(
            id=data["id"],
            symbol=data.get("symbol", ""),
            name=data.get("name", ""),
            image_large=image.get("large", ""),
            image_small=image.get("small", ""),
            image_thumb=image.get("thumb", ""),
            current_price=per_currency("current_price"),
            market_cap=per_currency("market_cap"),
            total_volume=per_currency("total_volume"),
            price_change_percentage_24h=safe_float(
                market.get("price_change_percentage_24h")
            ),
            price_change_percentage_7d=safe_float(
                market.get("price_change_percentage_7d")
            ),
            price_change_percentage_30d=safe_float(
                market.get("price_change_percentage_30d")
            ),
            description=(data.get("description") or {}).get("en", ""),
        )


@dataclass(frozen=True)
class PriceHistory:
    """
    Historical series for one asset.

    Each series is a list of (timestamp_ms, value) pairs in ascending
    timestamp order and may be empty.
    """

    prices: list[tuple[int, float]] = field(default_factory=list)
    market_caps: list[tuple[int, float]] = field(default_factory=list)
    total_volumes: list[tuple[int, float]] = field(default_factory=list)

    def price_values(self) -> list[float]:
        """Prices without timestamps, e.g. as sparkline input."""
        return [price for _, price in self.prices]

    def price_change_percentage(self) -> float:
        """
        Change between the first and last price, in percent.

        Returns 0.0 with fewer than two points or a zero starting price.
        """
        if len(self.prices) < 2:
            return 0.0
        first = self.prices[0][1]
        last = self.prices[-1][1]
        if first == 0:
            return 0.0
        return (last - first) / first * 100

    def to_frame(self) -> pd.DataFrame:
        """
        Combine the series into a DataFrame indexed by UTC timestamp.

        Returns:
            DataFrame with price, market_cap and total_volume columns
        """
        frames = []
        for column, series in (
            ("price", self.prices),
            ("market_cap", self.market_caps),
            ("total_volume", self.total_volumes),
        ):
            frame = pd.DataFrame(series, columns=["timestamp", column])
            frames.append(frame.set_index("timestamp"))

        df = pd.concat(frames, axis=1).sort_index()
        df.index = pd.to_datetime(df.index, unit="ms", utc=True)
        df.index.name = "timestamp"
        return df

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PriceHistory":
        """Create from a /coins/{id}/market_chart response body."""
        return cls(
            prices=sorted(_series(data.get("prices"))),
            market_caps=sorted(_series(data.get("market_caps"))),
            total_volumes=sorted(_series(data.get("total_volumes"))),
        )


@dataclass(frozen=True)
class SearchResult:
    """One candidate match from /search."""

    id: str
    name: str
    symbol: str
    thumb: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SearchResult":
        """Create from a /search coin entry."""
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            symbol=data.get("symbol", ""),
            thumb=data.get("thumb") or "",
        )
