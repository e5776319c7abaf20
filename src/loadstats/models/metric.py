"""
Models for metrics
"""

import math
from datetime import timedelta
from typing import TYPE_CHECKING, Any, Iterable, List, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from loadstats.errors import InvalidValueTypeError
from loadstats.formatting import (
    format_bytes,
    format_duration,
    format_float,
    format_rate,
    round_duration,
)
from loadstats.models.metric_types import MetricType, ValueType
from loadstats.models.submetric import Submetric
from loadstats.models.thresholds import Threshold
from loadstats.sinks.sink import Sink, new_sink

if TYPE_CHECKING:
    from loadstats.models.summary import Summary


class Metric(BaseModel):
    """
    The shape of a set of data.

    A metric is identified by its name and owns the sink its samples are
    aggregated into. The sink is never serialized.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str = Field(..., frozen=True, description="Unique metric name")
    type: MetricType = Field(..., frozen=True, description="How samples are aggregated")
    contains: ValueType = Field(
        default=ValueType.DEFAULT, frozen=True, description="What the values represent"
    )
    tainted: Optional[bool] = Field(
        default=None, description="Whether any threshold on this metric has failed"
    )
    thresholds: List[Threshold] = Field(default_factory=list)
    submetrics: List[Submetric] = Field(default_factory=list)
    sub: Optional[Submetric] = Field(
        default=None, description="The submetric this metric materializes, if any"
    )
    sink: Optional[Sink] = Field(default=None, exclude=True, repr=False)

    def model_post_init(self, __context: Any) -> None:
        if self.sink is None:
            self.sink = new_sink(self.type)

    @field_validator("type", mode="before")
    @classmethod
    def _decode_type(cls, value: Any) -> Any:
        if isinstance(value, str):
            return MetricType.from_label(value)
        return value

    @field_validator("contains", mode="before")
    @classmethod
    def _decode_contains(cls, value: Any) -> Any:
        if isinstance(value, str):
            return ValueType.from_label(value)
        return value

    @field_serializer("type", "contains")
    def _encode_type(self, value: Any) -> str:
        return value.label

    @classmethod
    def new(
        cls,
        name: str,
        metric_type: int,
        value_type: int = ValueType.DEFAULT,
        trend_stats: Optional[Sequence[str]] = None,
    ) -> Optional["Metric"]:
        """
        Create a metric with the sink implied by its type.

        Returns None when metric_type is not a known MetricType.
        """
        sink = new_sink(metric_type, trend_stats)
        if sink is None:
            return None
        try:
            contains = ValueType(value_type)
        except ValueError:
            raise InvalidValueTypeError() from None
        return cls(name=name, type=MetricType(metric_type), contains=contains, sink=sink)

    def humanize_value(self, value: float) -> str:
        """Render a value for display according to the metric's types"""
        if math.isnan(value) or math.isinf(value):
            return format_float(value)
        if self.type == MetricType.RATE:
            return format_rate(value)
        if self.contains == ValueType.TIME:
            return format_duration(round_duration(int(value)))
        if self.contains == ValueType.DATA:
            return format_bytes(max(int(value), 0))
        return format_float(value)

    def add_thresholds(self, sources: Iterable[str]) -> int:
        """
        Attach threshold rules by their source expressions.

        Sources already attached are skipped. Returns how many were added.
        """
        known = {threshold.source for threshold in self.thresholds}
        added = 0
        for source in sources:
            if source in known:
                continue
            self.thresholds.append(Threshold(source=source))
            known.add(source)
            added += 1
        return added

    def summary(self, window: timedelta) -> "Summary":
        """Snapshot the sink's current state over the given time window"""
        from loadstats.models.summary import Summary

        return Summary(metric=self, summary=self.sink.format(window))


Submetric.model_rebuild(_types_namespace={"Metric": Metric})
Metric.model_rebuild()
