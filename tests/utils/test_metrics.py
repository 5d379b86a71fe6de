"""
Tests for Prometheus metrics collection.
"""
from lead_scoring.utils.metrics import Counter, Histogram, MetricsRegistry, metrics


class TestCounter:

    def test_counter_increment(self):
        counter = Counter("test_counter", "Test counter")
        counter.inc()
        counter.inc(5)

        values = counter.collect()
        assert len(values) == 1
        assert values[0].value == 6

    def test_counter_with_labels(self):
        counter = Counter("test_counter", "Test counter", ["intent"])
        counter.inc(intent="High")
        counter.inc(2, intent="Low")
        counter.inc(intent="High")

        assert counter.value(intent="High") == 2
        assert counter.value(intent="Low") == 2
        assert counter.value(intent="Medium") == 0


class TestHistogram:

    def test_observations_are_cumulative(self):
        histogram = Histogram("test_seconds", "Test histogram", buckets=(0.1, 1.0))
        histogram.observe(0.05)
        histogram.observe(0.5)

        lines = histogram.export_lines()

        assert 'test_seconds_bucket{le="0.1"} 1' in lines
        assert 'test_seconds_bucket{le="1.0"} 2' in lines
        assert 'test_seconds_bucket{le="+Inf"} 2' in lines
        assert "test_seconds_count 2" in lines
        assert histogram.count() == 2


class TestMetricsRegistry:

    def test_export_format(self):
        registry = MetricsRegistry()
        registry.leads_scored.inc(intent="High")

        output = registry.export()

        assert "# HELP lead_scoring_leads_scored_total Leads scored by final intent" in output
        assert "# TYPE lead_scoring_leads_scored_total counter" in output
        assert 'lead_scoring_leads_scored_total{intent="High"} 1.0' in output
        assert "# TYPE lead_scoring_run_duration_seconds histogram" in output

    def test_reset(self):
        metrics.scoring_runs.inc()
        metrics.reset()

        assert metrics.scoring_runs.value() == 0
