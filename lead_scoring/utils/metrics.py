"""
Prometheus Metrics Collector

In-process counters and histograms for the scoring pipeline, exported in
Prometheus text exposition format (text/plain; version=0.0.4).
"""
import threading
from typing import Dict, List, Optional
from dataclasses import dataclass, field


@dataclass
class MetricValue:
    """Single metric value with optional labels."""
    value: float
    labels: Dict[str, str] = field(default_factory=dict)


def _label_key(labels: Dict[str, str]) -> tuple:
    return tuple(sorted(labels.items()))


class Counter:
    """Monotonic counter: leads scored, classifier calls, errors."""

    def __init__(self, name: str, description: str, labels: Optional[List[str]] = None):
        self.name = name
        self.description = description
        self.label_names = labels or []
        self._values: Dict[tuple, float] = {}
        self._lock = threading.Lock()

    def inc(self, amount: float = 1.0, **labels: str) -> None:
        key = _label_key(labels)
        with self._lock:
            self._values[key] = self._values.get(key, 0.0) + amount

    def value(self, **labels: str) -> float:
        with self._lock:
            return self._values.get(_label_key(labels), 0.0)

    def collect(self) -> List[MetricValue]:
        with self._lock:
            return [MetricValue(value=v, labels=dict(k)) for k, v in self._values.items()]


class Histogram:
    """
    Bucketed observations (durations).
    Bucket counts are cumulative: an observation lands in every bucket >= value.
    """

    DEFAULT_BUCKETS = (0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0)

    def __init__(
        self,
        name: str,
        description: str,
        labels: Optional[List[str]] = None,
        buckets: Optional[tuple] = None
    ):
        self.name = name
        self.description = description
        self.label_names = labels or []
        self.buckets = tuple(sorted(buckets or self.DEFAULT_BUCKETS))
        self._values: Dict[tuple, Dict] = {}
        self._lock = threading.Lock()

    def observe(self, value: float, **labels: str) -> None:
        key = _label_key(labels)
        with self._lock:
            data = self._values.setdefault(
                key, {"buckets": {b: 0 for b in self.buckets}, "sum": 0.0, "count": 0}
            )
            data["sum"] += value
            data["count"] += 1
            for bucket in self.buckets:
                if value <= bucket:
                    data["buckets"][bucket] += 1

    def count(self, **labels: str) -> int:
        with self._lock:
            data = self._values.get(_label_key(labels))
            return data["count"] if data else 0

    def export_lines(self) -> List[str]:
        lines = []
        with self._lock:
            for key, data in self._values.items():
                base = dict(key)
                for bucket in self.buckets:
                    labels = _format_labels({**base, "le": str(bucket)})
                    lines.append(f"{self.name}_bucket{labels} {data['buckets'][bucket]}")
                lines.append(f"{self.name}_bucket{_format_labels({**base, 'le': '+Inf'})} {data['count']}")
                lines.append(f"{self.name}_sum{_format_labels(base)} {data['sum']}")
                lines.append(f"{self.name}_count{_format_labels(base)} {data['count']}")
        return lines


def _format_labels(labels: Dict[str, str]) -> str:
    if not labels:
        return ""
    parts = [f'{k}="{v}"' for k, v in sorted(labels.items())]
    return "{" + ",".join(parts) + "}"


class MetricsRegistry:
    """Holds every application metric and renders them for /metrics."""

    def __init__(self):
        self._metrics: Dict[str, Counter | Histogram] = {}
        self._setup_metrics()

    def _setup_metrics(self) -> None:
        # ============================================
        # PIPELINE
        # ============================================
        self.scoring_runs = self.counter(
            "lead_scoring_runs_total",
            "Completed scoring runs"
        )

        self.run_duration = self.histogram(
            "lead_scoring_run_duration_seconds",
            "Duration of a full scoring run",
            buckets=(0.1, 0.5, 1.0, 5.0, 10.0, 30.0, 60.0, 300.0)
        )

        self.leads_scored = self.counter(
            "lead_scoring_leads_scored_total",
            "Leads scored by final intent",
            ["intent"]
        )

        self.lead_errors = self.counter(
            "lead_scoring_lead_errors_total",
            "Leads that failed scoring and were recorded with a zero score"
        )

        # ============================================
        # INTENT CLASSIFIER
        # ============================================
        self.classifier_calls = self.counter(
            "lead_scoring_classifier_calls_total",
            "Intent classifications by result source",
            ["source"]
        )

        self.classifier_fallbacks = self.counter(
            "lead_scoring_classifier_fallbacks_total",
            "Model classifications that fell back to the heuristic"
        )

        self.classifier_duration = self.histogram(
            "lead_scoring_classifier_duration_seconds",
            "Model-backed classification duration",
            ["source"]
        )

        self.circuit_transitions = self.counter(
            "lead_scoring_circuit_transitions_total",
            "Circuit breaker state changes by target state",
            ["circuit", "state"]
        )

    def counter(self, name: str, description: str, labels: Optional[List[str]] = None) -> Counter:
        metric = Counter(name, description, labels)
        self._metrics[name] = metric
        return metric

    def histogram(
        self,
        name: str,
        description: str,
        labels: Optional[List[str]] = None,
        buckets: Optional[tuple] = None
    ) -> Histogram:
        metric = Histogram(name, description, labels, buckets)
        self._metrics[name] = metric
        return metric

    def export(self) -> str:
        """
        Export all metrics in Prometheus text exposition format.
        https://prometheus.io/docs/instrumenting/exposition_formats/
        """
        lines = []

        for name, metric in self._metrics.items():
            lines.append(f"# HELP {name} {metric.description}")

            if isinstance(metric, Histogram):
                lines.append(f"# TYPE {name} histogram")
                lines.extend(metric.export_lines())
            else:
                lines.append(f"# TYPE {name} counter")
                for mv in metric.collect():
                    lines.append(f"{name}{_format_labels(mv.labels)} {mv.value}")

            lines.append("")

        return "\n".join(lines)

    def reset(self) -> None:
        """Reset all metrics. Useful for testing."""
        self._metrics.clear()
        self._setup_metrics()


# Global metrics instance
metrics = MetricsRegistry()
