"""Prometheus metrics mirroring the in-memory telemetry."""

from prometheus_client import Counter, Histogram

operation_latency_ms = Histogram(
    "operation_latency_ms",
    "Operation latency in milliseconds",
    ["category", "outcome"],
    buckets=[50, 100, 500, 1000, 2000, 5000, 10000, 15000, 20000, 30000, 60000],
)

operation_errors_total = Counter(
    "operation_errors_total",
    "Total failed operations",
    ["category", "error_kind"],
)

alerts_raised_total = Counter(
    "alerts_raised_total",
    "Total alerts raised",
    ["kind", "severity"],
)


class TelemetryMetrics:
    """Interface for metric export (no-op by default)."""

    def record_latency(self, category: str, outcome: str, latency_ms: float) -> None:
        """Record operation latency."""
        pass

    def inc_error(self, category: str, error_kind: str) -> None:
        """Increment error counter."""
        pass

    def inc_alert(self, kind: str, severity: str) -> None:
        """Increment alert counter."""
        pass


class PrometheusTelemetryMetrics(TelemetryMetrics):
    """Prometheus-based telemetry metrics implementation."""

    def record_latency(self, category: str, outcome: str, latency_ms: float) -> None:
        """Record operation latency."""
        operation_latency_ms.labels(category=category, outcome=outcome).observe(latency_ms)

    def inc_error(self, category: str, error_kind: str) -> None:
        """Increment error counter."""
        operation_errors_total.labels(category=category, error_kind=error_kind).inc()

    def inc_alert(self, kind: str, severity: str) -> None:
        """Increment alert counter."""
        alerts_raised_total.labels(kind=kind, severity=severity).inc()
