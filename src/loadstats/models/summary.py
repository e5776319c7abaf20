"""
Models for metric summaries
"""

from typing import Dict

from pydantic import BaseModel, Field

from loadstats.models.metric import Metric


class Summary(BaseModel):
    """A snapshot of a metric's sink, taken at reporting time"""

    metric: Metric = Field(..., description="The summarized metric")
    summary: Dict[str, float] = Field(
        ..., description="Statistic name to its current value"
    )

    def humanized(self) -> Dict[str, str]:
        """The same statistics rendered with the metric's display rules"""
        return {
            name: self.metric.humanize_value(value)
            for name, value in self.summary.items()
        }
