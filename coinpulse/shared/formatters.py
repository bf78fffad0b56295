"""
Shared formatting utilities.

Provides number formatting, type conversion, and display helpers used by
the market data types and by the dashboard's table, stats and chart views.
"""

from typing import Any


def safe_float(value: Any, default: float = 0.0) -> float:
    """
    Safely convert a value to float.

    Handles null JSON fields, string values and the literal string "None".

    Args:
        value: Value to convert (string, number, or None)
        default: Default value if conversion fails

    Returns:
        Float value or default

    Examples:
        >>> safe_float("123.45")
        123.45
        >>> safe_float(None)
        0.0
        >>> safe_float("None", -1.0)
        -1.0
        >>> safe_float("invalid")
        0.0
    """
    if value is None or value == "None" or value == "":
        return default
    try:
        return float(value)
    except (ValueError, TypeError):
        return default


def safe_int(value: Any, default: int = 0) -> int:
    """
    Safely convert a value to integer.

    Args:
        value: Value to convert
        default: Default value if conversion fails

    Returns:
        Integer value or default

    Examples:
        >>> safe_int("123")
        123
        >>> safe_int(45.7)
        45
        >>> safe_int(None)
        0
    """
    if value is None or value == "None" or value == "":
        return default
    try:
        return int(float(value))  # Handle "123.45" -> 123
    except (ValueError, TypeError, OverflowError):
        return default


def format_price(price: float, currency: Any) -> str:
    """
    Format a price with its currency symbol.

    Prices of 1 or more show exactly 2 decimals. Smaller prices keep up to
    6 decimals so sub-cent coins stay readable.

    Args:
        price: Price in the given currency
        currency: SupportedCurrency (anything with a ``symbol``) or a symbol string

    Returns:
        Formatted price (e.g., "$43,250.12", "€0.000123")

    Examples:
        >>> format_price(43250.1234, "$")
        '$43,250.12'
        >>> format_price(0.5, "$")
        '$0.50'
        >>> format_price(0.00012345, "$")
        '$0.000123'
    """
    symbol = getattr(currency, "symbol", currency)

    if price >= 1:
        return f"{symbol}{price:,.2f}"

    text = f"{price:,.6f}"
    integer_part, _, decimals = text.partition(".")
    decimals = decimals.rstrip("0").ljust(2, "0")
    return f"{symbol}{integer_part}.{decimals}"


def format_large_number(
    value: float | int | None,
    currency_prefix: str = "",
) -> str:
    """
    Format large numbers with T/B/M/K suffixes.

    Args:
        value: Number to format
        currency_prefix: Prefix to add (e.g., "$"), empty by default

    Returns:
        Formatted string (e.g., "1.52T", "$250.30M", "999.50")

    Examples:
        >>> format_large_number(1_520_000_000_000)
        '1.52T'
        >>> format_large_number(250_300_000, currency_prefix="$")
        '$250.30M'
        >>> format_large_number(None)
        'N/A'
    """
    if value is None:
        return "N/A"

    if value >= 1e12:
        return f"{currency_prefix}{value / 1e12:.2f}T"
    elif value >= 1e9:
        return f"{currency_prefix}{value / 1e9:.2f}B"
    elif value >= 1e6:
        return f"{currency_prefix}{value / 1e6:.2f}M"
    elif value >= 1e3:
        return f"{currency_prefix}{value / 1e3:.2f}K"
    else:
        return f"{currency_prefix}{value:.2f}"


def format_percentage(value: float | None, decimal_places: int = 2) -> str:
    """
    Format a percentage change with an explicit sign.

    Args:
        value: Percentage value (already multiplied by 100)
        decimal_places: Number of decimal places

    Returns:
        Formatted percentage string (e.g., "+5.23%", "-2.10%")

    Examples:
        >>> format_percentage(5.234)
        '+5.23%'
        >>> format_percentage(-2.1)
        '-2.10%'
        >>> format_percentage(None)
        'N/A'
    """
    if value is None:
        return "N/A"

    formatted = f"{abs(value):.{decimal_places}f}"
    return f"+{formatted}%" if value >= 0 else f"-{formatted}%"
