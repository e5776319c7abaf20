"""Error types for the loadstats package"""


class StatsError(Exception):
    """Base class for loadstats errors"""


class InvalidMetricTypeError(StatsError, ValueError):
    """The serialized metric type is invalid"""

    def __init__(self, message: str = "Invalid metric type"):
        super().__init__(message)


class InvalidValueTypeError(StatsError, ValueError):
    """The serialized value type is invalid"""

    def __init__(self, message: str = "Invalid value type"):
        super().__init__(message)
