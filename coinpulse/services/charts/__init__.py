"""
Chart geometry for the dashboard.
"""

from .sparkline import (
    DEFAULT_VIEWPORT,
    Sparkline,
    SparklineViewport,
    build_sparkline,
    sparkline_path,
    sparkline_points,
    sparkline_resource_id,
)

__all__ = [
    "DEFAULT_VIEWPORT",
    "Sparkline",
    "SparklineViewport",
    "build_sparkline",
    "sparkline_path",
    "sparkline_points",
    "sparkline_resource_id",
]
