"""
A single measurement taken during a test run.
"""

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Dict, Optional

from loadstats.models.sample_tags import SampleTags, clone_tags

if TYPE_CHECKING:
    from loadstats.models.metric import Metric


class Sample:
    """
    One observed value of a metric.

    The metric and tags are shared references; a sample owns nothing and is
    discarded once its value has been routed into the metric's sink.
    """

    __slots__ = ("metric", "time", "tags", "value")

    def __init__(
        self,
        metric: "Metric",
        value: float,
        tags: Optional[SampleTags] = None,
        time: Optional[datetime] = None,
    ):
        self.metric = metric
        self.value = float(value)
        self.tags = tags
        self.time = time or datetime.now(timezone.utc)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "metric": self.metric.name,
            "time": self.time.isoformat(),
            "tags": clone_tags(self.tags) if self.tags is not None else None,
            "value": self.value,
        }

    def __repr__(self) -> str:
        return (
            f"Sample(metric={self.metric.name!r}, value={self.value!r}, "
            f"tags={self.tags!r}, time={self.time.isoformat()!r})"
        )
