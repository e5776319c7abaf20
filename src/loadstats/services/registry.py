"""
Metrics Registry

Owns the metric definitions of a test run, materializes submetrics and
routes samples into the sinks they belong to.
"""

import logging
import threading
from datetime import timedelta
from typing import Dict, Iterable, List, Optional

from loadstats.config import StatsConfig
from loadstats.errors import InvalidMetricTypeError
from loadstats.models import (
    Metric,
    MetricType,
    Sample,
    Submetric,
    Summary,
    ValueType,
    new_submetric,
)

logger = logging.getLogger(__name__)


class MetricsRegistry:
    """
    Registry of metrics by name.

    The registry is the single writer for metric definitions: registration,
    submetric linking, thresholds and the tainted flag are all changed under
    one lock. Sample routing only reads definitions; the sinks do their own
    locking.
    """

    def __init__(self, config: Optional[StatsConfig] = None):
        self.config = config or StatsConfig()
        self._metrics: Dict[str, Metric] = {}
        self._lock = threading.Lock()

    def new_metric(
        self,
        name: str,
        metric_type: int,
        value_type: int = ValueType.DEFAULT,
    ) -> Metric:
        """
        Get the metric with the given name, creating it if needed.

        Raises:
            ValueError: if a metric with this name exists with other types
            InvalidMetricTypeError: if metric_type is unknown
        """
        with self._lock:
            existing = self._metrics.get(name)
            if existing is not None:
                if existing.type != metric_type or existing.contains != value_type:
                    raise ValueError(
                        f"Metric {name} already registered as "
                        f"{MetricType.describe(existing.type)}/{ValueType.describe(existing.contains)}"
                    )
                return existing

            metric = Metric.new(
                name,
                metric_type,
                value_type,
                trend_stats=self.config.summary_trend_stats,
            )
            if metric is None:
                raise InvalidMetricTypeError(
                    f"Invalid metric type for {name}: {MetricType.describe(metric_type)}"
                )

            self._metrics[name] = metric
            logger.info(f"Registered metric {name} ({metric.type.label}, {metric.contains.label})")
            return metric

    def get(self, name: str) -> Optional[Metric]:
        """Get a metric by name"""
        with self._lock:
            return self._metrics.get(name)

    def metrics(self) -> List[Metric]:
        """All registered metrics, sorted by name"""
        with self._lock:
            registered = list(self._metrics.values())
        return sorted(registered, key=lambda m: m.name)

    def add_submetric(self, name: str) -> Submetric:
        """
        Resolve a submetric name against its registered parent.

        The submetric is materialized as a metric of its own, with the
        parent's types, registered under the full submetric name.

        Raises:
            ValueError: if the name carries no {...} filter
            KeyError: if the parent metric is not registered
        """
        parent_name, submetric = new_submetric(name)
        if submetric.tags is None:
            raise ValueError(f"Submetric name {name} has no tag filter")

        with self._lock:
            parent = self._metrics.get(parent_name)
            if parent is None:
                raise KeyError(f"Parent metric {parent_name} of {name} is not registered")

            for existing in parent.submetrics:
                if existing.name == name:
                    return existing

            child = Metric.new(
                name,
                parent.type,
                parent.contains,
                trend_stats=self.config.summary_trend_stats,
            )
            child.sub = submetric
            submetric.metric = child
            parent.submetrics.append(submetric)
            self._metrics[name] = child

        logger.info(f"Added submetric {name} to {parent_name}")
        return submetric

    def apply_config(self, config: Optional[StatsConfig] = None) -> None:
        """
        Attach configured thresholds, resolving submetric names.

        Entries naming an unknown metric, or a submetric of one, are logged
        and skipped. Sources already attached to a metric are not added again,
        so applying the same config twice is harmless.
        """
        config = config or self.config

        for name, sources in config.thresholds.items():
            parent_name, submetric = new_submetric(name)
            if submetric.tags is not None:
                if self.get(parent_name) is None:
                    logger.warning(
                        f"Thresholds configured for {name} but parent metric "
                        f"{parent_name} is unknown"
                    )
                    continue
                self.add_submetric(name)

            metric = self.get(name)
            if metric is None:
                logger.warning(f"Thresholds configured for unknown metric {name}")
                continue

            with self._lock:
                added = metric.add_thresholds(sources)
            logger.info(f"Attached {added} threshold(s) to {name}")

    def set_tainted(self, name: str, tainted: bool) -> None:
        """Record whether a threshold on the named metric has failed"""
        with self._lock:
            metric = self._metrics.get(name)
            if metric is None:
                raise KeyError(f"Metric {name} is not registered")
            metric.tainted = tainted

    def add_samples(self, samples: Iterable[Sample]) -> int:
        """
        Route samples into their metrics' sinks.

        Each sample also goes into every submetric of its metric whose
        filter tags it carries. Returns the number of samples routed.
        """
        count = 0
        for sample in samples:
            sample.metric.sink.add(sample)
            for submetric in sample.metric.submetrics:
                if submetric.metric is not None and submetric.matches(sample.tags):
                    submetric.metric.sink.add(sample)
            count += 1

        logger.debug(f"Routed {count} samples")
        return count

    def summaries(self, window: timedelta) -> List[Summary]:
        """Summarize every registered metric over the given window"""
        return [metric.summary(window) for metric in self.metrics()]
