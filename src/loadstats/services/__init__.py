"""Services for the loadstats package"""

from .registry import MetricsRegistry

__all__ = [
    "MetricsRegistry",
]
