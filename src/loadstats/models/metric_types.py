"""
Metric and value type enumerations.

Both enumerations serialize to JSON as quoted lowercase literals and are
decoded back strictly: any other literal is rejected.
"""

import json
from enum import IntEnum
from typing import Union

from loadstats.errors import InvalidMetricTypeError, InvalidValueTypeError

INVALID = "[INVALID]"


def _decode_literal(data: Union[bytes, str]) -> str:
    if isinstance(data, bytes):
        return data.decode("utf-8", errors="replace")
    return data


class MetricType(IntEnum):
    """The type of a metric, which decides how its samples are aggregated"""

    COUNTER = 0  # sums its data points
    GAUGE = 1  # displays the latest value
    TREND = 2  # min/max/avg/med are interesting
    RATE = 3  # displays % of values that aren't 0

    @property
    def label(self) -> str:
        return _METRIC_TYPE_LABELS[self]

    def __str__(self) -> str:
        return json.dumps(self.label)

    def to_json(self) -> bytes:
        return MetricType.encode(self)

    @classmethod
    def encode(cls, value: int) -> bytes:
        """Serialize a metric type as a quoted string literal"""
        try:
            return json.dumps(cls(value).label).encode()
        except ValueError:
            raise InvalidMetricTypeError() from None

    @classmethod
    def from_json(cls, data: Union[bytes, str]) -> "MetricType":
        """Deserialize a metric type from its quoted string literal"""
        literal = _decode_literal(data)
        for member, label in _METRIC_TYPE_LABELS.items():
            if literal == json.dumps(label):
                return member
        raise InvalidMetricTypeError()

    @classmethod
    def from_label(cls, label: str) -> "MetricType":
        """Look up a metric type by its bare (unquoted) name"""
        for member, known in _METRIC_TYPE_LABELS.items():
            if label == known:
                return member
        raise InvalidMetricTypeError()

    @classmethod
    def describe(cls, value: int) -> str:
        """Display string for any integer; never raises"""
        try:
            return str(cls(value))
        except ValueError:
            return INVALID


class ValueType(IntEnum):
    """The kind of values a metric contains"""

    DEFAULT = 0  # presented as-is
    TIME = 1  # durations in nanoseconds
    DATA = 2  # data amounts in bytes

    @property
    def label(self) -> str:
        return _VALUE_TYPE_LABELS[self]

    def __str__(self) -> str:
        return json.dumps(self.label)

    def to_json(self) -> bytes:
        return ValueType.encode(self)

    @classmethod
    def encode(cls, value: int) -> bytes:
        """Serialize a value type as a quoted string literal"""
        try:
            return json.dumps(cls(value).label).encode()
        except ValueError:
            raise InvalidValueTypeError() from None

    @classmethod
    def from_json(cls, data: Union[bytes, str]) -> "ValueType":
        """Deserialize a value type from its quoted string literal"""
        literal = _decode_literal(data)
        for member, label in _VALUE_TYPE_LABELS.items():
            if literal == json.dumps(label):
                return member
        raise InvalidValueTypeError()

    @classmethod
    def from_label(cls, label: str) -> "ValueType":
        """Look up a value type by its bare (unquoted) name"""
        for member, known in _VALUE_TYPE_LABELS.items():
            if label == known:
                return member
        raise InvalidValueTypeError()

    @classmethod
    def describe(cls, value: int) -> str:
        """Display string for any integer; never raises"""
        try:
            return str(cls(value))
        except ValueError:
            return INVALID


_METRIC_TYPE_LABELS = {
    MetricType.COUNTER: "counter",
    MetricType.GAUGE: "gauge",
    MetricType.TREND: "trend",
    MetricType.RATE: "rate",
}

_VALUE_TYPE_LABELS = {
    ValueType.DEFAULT: "default",
    ValueType.TIME: "time",
    ValueType.DATA: "data",
}
