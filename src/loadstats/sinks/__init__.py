"""Sinks that aggregate metric samples"""

from .sink import (
    DEFAULT_TREND_STATS,
    CounterSink,
    GaugeSink,
    RateSink,
    Sink,
    TrendSink,
    new_sink,
    parse_trend_stat,
)

__all__ = [
    "DEFAULT_TREND_STATS",
    "CounterSink",
    "GaugeSink",
    "RateSink",
    "Sink",
    "TrendSink",
    "new_sink",
    "parse_trend_stat",
]
