"""
Tests for the MetricsRegistry service.
"""

import logging
import threading
from datetime import timedelta

import pytest

from loadstats import (
    InvalidMetricTypeError,
    MetricsRegistry,
    MetricType,
    Sample,
    SampleTags,
    StatsConfig,
    ValueType,
)


class TestNewMetric:
    """Tests for registering metrics."""

    def test_registers_metric(self, registry):
        """Test that a new metric is created and can be looked up."""
        metric = registry.new_metric("iterations", MetricType.COUNTER)
        assert registry.get("iterations") is metric
        assert registry.get("missing") is None

    def test_returns_existing(self, registry):
        """Test that registering the same metric twice returns one instance."""
        first = registry.new_metric("vus", MetricType.GAUGE)
        second = registry.new_metric("vus", MetricType.GAUGE)
        assert first is second

    def test_conflicting_type(self, registry):
        """Test that re-registering with another type fails."""
        registry.new_metric("vus", MetricType.GAUGE)
        with pytest.raises(ValueError, match="already registered"):
            registry.new_metric("vus", MetricType.COUNTER)

    def test_conflicting_value_type(self, registry):
        """Test that re-registering with another value type fails."""
        registry.new_metric("data_sent", MetricType.COUNTER, ValueType.DATA)
        with pytest.raises(ValueError):
            registry.new_metric("data_sent", MetricType.COUNTER)

    def test_invalid_type(self, registry):
        """Test that an unknown metric type is rejected."""
        with pytest.raises(InvalidMetricTypeError):
            registry.new_metric("m", 12)
        assert registry.get("m") is None

    def test_metrics_sorted(self, http_registry):
        """Test that metrics are listed by name."""
        names = [m.name for m in http_registry.metrics()]
        assert names == ["http_req_duration", "http_req_failed", "http_reqs"]

    def test_trend_stats_from_config(self):
        """Test that trend metrics report the configured statistics."""
        registry = MetricsRegistry(StatsConfig(summary_trend_stats=["min", "max"]))
        metric = registry.new_metric("t", MetricType.TREND)
        assert set(metric.summary(timedelta(seconds=1)).summary) == {"min", "max"}

    def test_listing_while_registering(self, registry):
        """Test that listing metrics is safe while others register new ones."""
        errors = []
        done = threading.Event()

        def register(prefix):
            for i in range(200):
                registry.new_metric(f"{prefix}_{i}", MetricType.COUNTER)

        def list_metrics():
            try:
                while not done.is_set():
                    registry.metrics()
            except RuntimeError as e:
                errors.append(e)

        reader = threading.Thread(target=list_metrics)
        reader.start()
        writers = [threading.Thread(target=register, args=(p,)) for p in ("a", "b")]
        for writer in writers:
            writer.start()
        for writer in writers:
            writer.join()
        done.set()
        reader.join()

        assert errors == []
        assert len(registry.metrics()) == 400


class TestAddSubmetric:
    """Tests for materializing submetrics."""

    def test_links_submetric(self, http_registry):
        """Test that the submetric, its metric and its parent are linked."""
        sm = http_registry.add_submetric("http_req_duration{status:200}")
        parent = http_registry.get("http_req_duration")

        assert parent.submetrics == [sm]
        assert sm.metric is http_registry.get("http_req_duration{status:200}")
        assert sm.metric.sub is sm
        assert sm.metric.type is MetricType.TREND
        assert sm.metric.contains is ValueType.TIME
        assert sm.metric.sink is not parent.sink

    def test_same_name_reuses_submetric(self, http_registry):
        """Test that adding a submetric twice does not duplicate it."""
        first = http_registry.add_submetric("http_reqs{status:200}")
        second = http_registry.add_submetric("http_reqs{status:200}")
        assert first is second
        assert len(http_registry.get("http_reqs").submetrics) == 1

    def test_unknown_parent(self, registry):
        """Test that the parent metric must exist."""
        with pytest.raises(KeyError):
            registry.add_submetric("nope{status:200}")

    def test_name_without_filter_rejected(self, http_registry):
        """Test that a bare metric name cannot replace its own metric."""
        parent = http_registry.get("http_reqs")

        with pytest.raises(ValueError, match="no tag filter"):
            http_registry.add_submetric("http_reqs")

        assert http_registry.get("http_reqs") is parent
        assert parent.submetrics == []
        assert parent.sub is None
        assert [m.name for m in http_registry.metrics()] == [
            "http_req_duration",
            "http_req_failed",
            "http_reqs",
        ]


class TestAddSamples:
    """Tests for routing samples."""

    def test_routes_to_matching_submetrics(self, http_registry, ok_tags, error_tags):
        """Test that submetrics only see samples carrying their tags."""
        reqs = http_registry.get("http_reqs")
        ok = http_registry.add_submetric("http_reqs{status:200}")
        posts = http_registry.add_submetric("http_reqs{method:POST}")

        routed = http_registry.add_samples(
            [
                Sample(reqs, 1, ok_tags),
                Sample(reqs, 1, ok_tags),
                Sample(reqs, 1, error_tags),
                Sample(reqs, 1),
            ]
        )

        window = timedelta(seconds=1)
        assert routed == 4
        assert reqs.summary(window).summary["count"] == 4.0
        assert ok.metric.summary(window).summary["count"] == 2.0
        assert posts.metric.summary(window).summary["count"] == 1.0

    def test_shared_tags_are_not_copied(self, http_registry, ok_tags):
        """Test that samples keep the tag set they were given."""
        reqs = http_registry.get("http_reqs")
        samples = [Sample(reqs, 1, ok_tags) for _ in range(3)]
        http_registry.add_samples(samples)
        assert all(sample.tags is ok_tags for sample in samples)

    def test_rate_submetric(self, http_registry):
        """Test a rate submetric over failed requests."""
        failed = http_registry.get("http_req_failed")
        login = http_registry.add_submetric("http_req_failed{name:login}")
        login_tags = SampleTags.copy_of({"name": "login"})
        other_tags = SampleTags.copy_of({"name": "home"})

        http_registry.add_samples(
            [
                Sample(failed, 1, login_tags),
                Sample(failed, 0, login_tags),
                Sample(failed, 0, other_tags),
                Sample(failed, 0, other_tags),
            ]
        )

        window = timedelta(seconds=1)
        assert failed.summary(window).summary == {"rate": 0.25}
        assert login.metric.summary(window).summary == {"rate": 0.5}


class TestApplyConfig:
    """Tests for attaching configured thresholds."""

    def test_attaches_thresholds(self, http_registry):
        """Test thresholds on metrics and on submetrics."""
        config = StatsConfig(
            thresholds={
                "http_req_duration": ["p(95)<500", "avg<200"],
                "http_reqs{status:500}": ["count<1"],
            }
        )

        http_registry.apply_config(config)

        duration = http_registry.get("http_req_duration")
        assert [t.source for t in duration.thresholds] == ["p(95)<500", "avg<200"]

        errors = http_registry.get("http_reqs{status:500}")
        assert [t.source for t in errors.thresholds] == ["count<1"]
        assert errors.sub.tags.get("status") == ("500", True)

    def test_uses_registry_config_by_default(self):
        """Test that the registry's own config is applied without arguments."""
        registry = MetricsRegistry(StatsConfig(thresholds={"checks": ["rate>0.9"]}))
        registry.new_metric("checks", MetricType.RATE)
        registry.apply_config()
        assert registry.get("checks").thresholds[0].source == "rate>0.9"

    def test_unknown_metric_is_skipped(self, registry, caplog):
        """Test that thresholds for unknown metrics are logged and skipped."""
        config = StatsConfig(thresholds={"missing": ["count<1"]})
        with caplog.at_level(logging.WARNING, logger="loadstats.services.registry"):
            registry.apply_config(config)
        assert "unknown metric missing" in caplog.text

    def test_unknown_parent_is_skipped(self, http_registry, caplog):
        """Test that a submetric of an unknown metric does not stop the rest."""
        config = StatsConfig(
            thresholds={
                "http_reqs": ["count<100"],
                "nope{a:1}": ["count<1"],
                "http_req_failed": ["rate<0.01"],
            }
        )

        with caplog.at_level(logging.WARNING, logger="loadstats.services.registry"):
            http_registry.apply_config(config)

        assert [t.source for t in http_registry.get("http_reqs").thresholds] == ["count<100"]
        assert [t.source for t in http_registry.get("http_req_failed").thresholds] == [
            "rate<0.01"
        ]
        assert http_registry.get("nope{a:1}") is None
        assert "parent metric nope is unknown" in caplog.text

    def test_applying_twice_does_not_duplicate(self, http_registry):
        """Test that re-applying a config leaves thresholds unchanged."""
        config = StatsConfig(
            thresholds={
                "http_req_duration": ["p(95)<500"],
                "http_reqs{status:500}": ["count<1"],
            }
        )

        http_registry.apply_config(config)
        http_registry.apply_config(config)

        assert len(http_registry.get("http_req_duration").thresholds) == 1
        assert len(http_registry.get("http_reqs{status:500}").thresholds) == 1
        assert len(http_registry.get("http_reqs").submetrics) == 1


class TestTaintedAndSummaries:
    """Tests for the tainted flag and summaries."""

    def test_set_tainted(self, http_registry):
        """Test recording threshold failures."""
        http_registry.set_tainted("http_reqs", True)
        assert http_registry.get("http_reqs").tainted is True
        http_registry.set_tainted("http_reqs", False)
        assert http_registry.get("http_reqs").tainted is False

    def test_set_tainted_unknown(self, registry):
        """Test that an unknown metric cannot be tainted."""
        with pytest.raises(KeyError):
            registry.set_tainted("missing", True)

    def test_summaries(self, http_registry, ok_tags):
        """Test one summary per registered metric, submetrics included."""
        http_registry.add_submetric("http_reqs{status:200}")
        reqs = http_registry.get("http_reqs")
        http_registry.add_samples([Sample(reqs, 1, ok_tags)])

        summaries = http_registry.summaries(timedelta(seconds=1))

        assert [s.metric.name for s in summaries] == [
            "http_req_duration",
            "http_req_failed",
            "http_reqs",
            "http_reqs{status:200}",
        ]
        assert summaries[3].summary == {"count": 1.0, "rate": 1.0}
