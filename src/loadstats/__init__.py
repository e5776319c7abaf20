"""
loadstats

In-memory representation of load test measurements: metric definitions,
immutable sample tag sets, submetric filters, samples and summaries.
"""

from loadstats.models import (
    Metric,
    MetricType,
    Sample,
    SampleTags,
    Submetric,
    Summary,
    Threshold,
    ValueType,
    new_submetric,
)
from loadstats.errors import InvalidMetricTypeError, InvalidValueTypeError, StatsError
from loadstats.sinks import Sink
from loadstats.config import StatsConfig
from loadstats.services import MetricsRegistry

__version__ = "0.1.0"

__all__ = [
    "Metric",
    "MetricType",
    "Sample",
    "SampleTags",
    "Submetric",
    "Summary",
    "Threshold",
    "ValueType",
    "new_submetric",
    "InvalidMetricTypeError",
    "InvalidValueTypeError",
    "StatsError",
    "Sink",
    "StatsConfig",
    "MetricsRegistry",
]
