"""
Sink implementations.

A sink incorporates the values of samples routed to a metric and can produce
a summary of them. Every metric owns exactly one sink, picked from its
metric type. Sinks are the only place a metric's evolving state lives, so
each one serializes access to that state with its own lock.
"""

import math
import re
import threading
from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Sequence

from loadstats.models.metric_types import MetricType
from loadstats.models.sample import Sample

DEFAULT_TREND_STATS = ["avg", "min", "med", "max", "p(90)", "p(95)"]

_PERCENTILE_RE = re.compile(r"^p\((\d+(?:\.\d+)?)\)$")
_PLAIN_TREND_STATS = {"avg", "min", "med", "max", "count", "sum"}


def parse_trend_stat(name: str) -> Optional[float]:
    """
    Validate a trend statistic name.

    Returns the percentile as a fraction for p(N) names, None for the plain
    statistics, and raises ValueError for anything else.
    """
    if name in _PLAIN_TREND_STATS:
        return None
    match = _PERCENTILE_RE.match(name)
    if not match:
        raise ValueError(f"Invalid trend stat: {name}")
    percentile = float(match.group(1))
    if percentile > 100:
        raise ValueError(f"Invalid percentile in trend stat: {name}")
    return percentile / 100


class Sink(ABC):
    """Abstract interface for metric aggregation"""

    def __init__(self):
        self._lock = threading.Lock()

    @abstractmethod
    def add(self, sample: Sample) -> None:
        """Incorporate one sample's value"""
        pass

    @abstractmethod
    def format(self, window: timedelta) -> Dict[str, float]:
        """Summarize the values seen so far over the given time window"""
        pass


class CounterSink(Sink):
    """Sums its values"""

    def __init__(self):
        super().__init__()
        self.value = 0.0
        self.first: Optional[datetime] = None

    def add(self, sample: Sample) -> None:
        with self._lock:
            self.value += sample.value
            if self.first is None:
                self.first = sample.time

    def format(self, window: timedelta) -> Dict[str, float]:
        with self._lock:
            seconds = window.total_seconds()
            rate = self.value / seconds if seconds > 0 else 0.0
            return {"count": self.value, "rate": rate}


class GaugeSink(Sink):
    """Keeps the latest value along with the extremes"""

    def __init__(self):
        super().__init__()
        self.value = 0.0
        self.max = 0.0
        self.min = 0.0
        self._min_set = False

    def add(self, sample: Sample) -> None:
        with self._lock:
            self.value = sample.value
            if sample.value > self.max:
                self.max = sample.value
            if sample.value < self.min or not self._min_set:
                self.min = sample.value
                self._min_set = True

    def format(self, window: timedelta) -> Dict[str, float]:
        with self._lock:
            return {"value": self.value}


class TrendSink(Sink):
    """Keeps every value so that the distribution can be summarized"""

    def __init__(self, stats: Optional[Sequence[str]] = None):
        super().__init__()
        self.stats: List[str] = list(stats) if stats is not None else list(DEFAULT_TREND_STATS)
        self._percentiles = {name: parse_trend_stat(name) for name in self.stats}
        self.values: List[float] = []
        self._jumbled = False
        self.count = 0
        self.min = 0.0
        self.max = 0.0
        self.sum = 0.0
        self.avg = 0.0

    def add(self, sample: Sample) -> None:
        with self._lock:
            value = sample.value
            self.values.append(value)
            self._jumbled = True
            self.count += 1
            self.sum += value
            self.avg = self.sum / self.count
            if value > self.max or self.count == 1:
                self.max = value
            if value < self.min or self.count == 1:
                self.min = value

    def _sort(self) -> None:
        if self._jumbled:
            self.values.sort()
            self._jumbled = False

    def _percentile(self, pct: float) -> float:
        if self.count == 0:
            return 0.0
        if self.count == 1:
            return self.values[0]
        self._sort()
        if self.count == 2:
            return self.values[0] if pct < 0.5 else self.values[1]

        # Linear interpolation between the closest ranks
        index = pct * (self.count - 1)
        lower = self.values[math.floor(index)]
        upper = self.values[math.ceil(index)]
        return lower + (upper - lower) * (index - math.floor(index))

    def percentile(self, pct: float) -> float:
        """Value at the given percentile, pct being a fraction in [0, 1]"""
        with self._lock:
            return self._percentile(pct)

    def format(self, window: timedelta) -> Dict[str, float]:
        with self._lock:
            result: Dict[str, float] = {}
            for name, pct in self._percentiles.items():
                if pct is not None:
                    result[name] = self._percentile(pct)
                elif name == "med":
                    result[name] = self._percentile(0.5)
                else:
                    result[name] = float(getattr(self, name))
            return result


class RateSink(Sink):
    """Tracks the share of values that are non-zero"""

    def __init__(self):
        super().__init__()
        self.trues = 0
        self.total = 0

    def add(self, sample: Sample) -> None:
        with self._lock:
            self.total += 1
            if sample.value != 0:
                self.trues += 1

    def format(self, window: timedelta) -> Dict[str, float]:
        with self._lock:
            if self.total == 0:
                return {"rate": 0.0}
            return {"rate": self.trues / self.total}


def new_sink(
    metric_type: int, trend_stats: Optional[Sequence[str]] = None
) -> Optional[Sink]:
    """Create the sink for a metric type, or None if the type is unknown"""
    if metric_type == MetricType.COUNTER:
        return CounterSink()
    if metric_type == MetricType.GAUGE:
        return GaugeSink()
    if metric_type == MetricType.TREND:
        return TrendSink(trend_stats)
    if metric_type == MetricType.RATE:
        return RateSink()
    return None
