"""
Sparkline geometry: maps a numeric series onto a small fixed viewport.

The transform is pure. Values are scaled between the series minimum and
maximum; higher values get smaller y because the origin is top-left, as on
any SVG or canvas surface.

Usage:
    points = sparkline_points(coin.sparkline_7d)
    path = sparkline_path(points)  # "M 2,38 L 60,20 L 118,2"
"""

import hashlib
import math
from collections.abc import Sequence
from dataclasses import dataclass

Point = tuple[float, float]


@dataclass(frozen=True)
class SparklineViewport:
    """Target drawing area in device-independent units."""

    width: float = 120
    height: float = 40
    padding: float = 2

    @property
    def inner_width(self) -> float:
        return self.width - 2 * self.padding

    @property
    def inner_height(self) -> float:
        return self.height - 2 * self.padding


DEFAULT_VIEWPORT = SparklineViewport()


def sparkline_points(
    data: Sequence[float],
    viewport: SparklineViewport = DEFAULT_VIEWPORT,
) -> list[Point]:
    """
    Map a series onto viewport coordinates.

    Args:
        data: Ordered values, oldest first
        viewport: Drawing area (default 120x40 with padding 2)

    Returns:
        One (x, y) pair per value, first to last. Empty input gives an empty
        list; a single value is placed at the left padding, vertically centred.
        NaN and infinities propagate through the arithmetic without raising.

    Examples:
        >>> sparkline_points([5, 5, 5])
        [(2.0, 38.0), (60.0, 38.0), (118.0, 38.0)]
    """
    n = len(data)
    if n == 0:
        return []
    if n == 1:
        return [(float(viewport.padding), viewport.height / 2)]

    min_value = min(data)
    max_value = max(data)
    # Flat series: avoid dividing by zero
    value_range = (max_value - min_value) or 1

    points = []
    for i, value in enumerate(data):
        x = (i / (n - 1)) * viewport.inner_width + viewport.padding
        y = (
            viewport.height
            - viewport.padding
            - ((value - min_value) / value_range) * viewport.inner_height
        )
        points.append((float(x), float(y)))
    return points


def _format_number(value: float) -> str:
    if math.isfinite(value) and value.is_integer():
        return str(int(value))
    return repr(value)


def sparkline_path(points: Sequence[Point]) -> str | None:
    """
    SVG path data for a polyline through the points.

    Returns:
        "M x0,y0 L x1,y1 ..." or None when there is nothing to draw
    """
    if not points:
        return None
    coords = [f"{_format_number(x)},{_format_number(y)}" for x, y in points]
    return "M " + " L ".join(coords)


def sparkline_resource_id(data: Sequence[float], prefix: str = "gradient") -> str:
    """
    Stable identifier for a rendering resource (e.g., an SVG gradient).

    Derived from the series content, so the same series always gets the same
    id and the id never influences the geometry.

    Examples:
        >>> sparkline_resource_id([1.0, 2.0]) == sparkline_resource_id([1, 2])
        True
    """
    digest = hashlib.sha1(
        ",".join(repr(float(v)) for v in data).encode("utf-8")
    ).hexdigest()
    return f"{prefix}-{digest[:9]}"


@dataclass(frozen=True)
class Sparkline:
    """Everything the presentation layer needs to draw one sparkline."""

    points: tuple[Point, ...]
    path: str
    resource_id: str
    is_positive: bool
    viewport: SparklineViewport = DEFAULT_VIEWPORT


def build_sparkline(
    data: Sequence[float],
    is_positive: bool | None = None,
    viewport: SparklineViewport = DEFAULT_VIEWPORT,
    resource_prefix: str = "gradient",
) -> Sparkline | None:
    """
    Build a renderable sparkline.

    Args:
        data: Ordered values, oldest first
        is_positive: Trend colour flag; derived from last >= first when omitted
        viewport: Drawing area
        resource_prefix: Prefix for the resource id

    Returns:
        Sparkline, or None for empty input (caller must not render a path)
    """
    points = sparkline_points(data, viewport)
    path = sparkline_path(points)
    if path is None:
        return None

    if is_positive is None:
        is_positive = data[-1] >= data[0]

    return Sparkline(
        points=tuple(points),
        path=path,
        resource_id=sparkline_resource_id(data, resource_prefix),
        is_positive=is_positive,
        viewport=viewport,
    )
