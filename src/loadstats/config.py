"""
Configuration for metric collection
"""

from typing import Dict, List

from pydantic import BaseModel, Field, field_validator

from loadstats.sinks.sink import DEFAULT_TREND_STATS, parse_trend_stat

DEFAULT_SYSTEM_TAGS = [
    "proto",
    "subproto",
    "status",
    "method",
    "url",
    "name",
    "group",
    "check",
    "error",
    "tls_version",
]


class StatsConfig(BaseModel):
    """Options that shape how metrics are registered and summarized"""

    thresholds: Dict[str, List[str]] = Field(
        default_factory=dict,
        description="Metric or submetric name to threshold expressions",
    )
    summary_trend_stats: List[str] = Field(
        default_factory=lambda: list(DEFAULT_TREND_STATS),
        description="Statistics reported for trend metrics, e.g. avg, med, p(95)",
    )
    system_tags: List[str] = Field(
        default_factory=lambda: list(DEFAULT_SYSTEM_TAGS),
        description="Tag keys producers stamp on samples",
    )

    @field_validator("summary_trend_stats")
    @classmethod
    def _check_trend_stats(cls, stats: List[str]) -> List[str]:
        for name in stats:
            parse_trend_stat(name)
        return stats
