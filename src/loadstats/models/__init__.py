"""Models for the loadstats package"""

from .metric_types import MetricType, ValueType
from .sample_tags import SampleTags, clone_tags, get_tag, tags_equal, tags_to_json
from .sample import Sample
from .thresholds import Threshold
from .submetric import Submetric, new_submetric
from .metric import Metric
from .summary import Summary

__all__ = [
    "MetricType",
    "ValueType",
    "SampleTags",
    "clone_tags",
    "get_tag",
    "tags_equal",
    "tags_to_json",
    "Sample",
    "Threshold",
    "Submetric",
    "new_submetric",
    "Metric",
    "Summary",
]
