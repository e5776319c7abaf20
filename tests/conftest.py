"""Shared fixtures for loadstats tests."""

import pytest

from loadstats import MetricsRegistry, MetricType, SampleTags, StatsConfig, ValueType


@pytest.fixture
def registry():
    """A registry with default configuration."""
    return MetricsRegistry()


@pytest.fixture
def http_registry():
    """A registry with the usual HTTP metrics already registered."""
    registry = MetricsRegistry(StatsConfig())
    registry.new_metric("http_reqs", MetricType.COUNTER)
    registry.new_metric("http_req_duration", MetricType.TREND, ValueType.TIME)
    registry.new_metric("http_req_failed", MetricType.RATE)
    return registry


@pytest.fixture
def ok_tags():
    """Tags of a successful GET request."""
    return SampleTags.copy_of({"status": "200", "method": "GET"})


@pytest.fixture
def error_tags():
    """Tags of a failed POST request."""
    return SampleTags.copy_of({"status": "500", "method": "POST"})
