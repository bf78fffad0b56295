"""
Shared utilities module.

Provides number formatting and lenient type conversion used by the market
data types and the presentation layer.
"""

from .formatters import (
    format_large_number,
    format_percentage,
    format_price,
    safe_float,
    safe_int,
)

__all__ = [
    "safe_float",
    "safe_int",
    "format_price",
    "format_large_number",
    "format_percentage",
]
