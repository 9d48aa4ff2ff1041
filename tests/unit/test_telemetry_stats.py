"""Tests for percentile interpolation, windowed stats and summaries."""

import random
from datetime import datetime, timedelta, timezone

import pytest

from tripsynth.app.config import Settings
from tripsynth.app.models.telemetry import ExecutionMetric, MetricMetadata
from tripsynth.app.services import TelemetryServices
from tripsynth.app.telemetry.stats import compute_agent_summary, compute_stats, percentile

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


def completed_metric(
    index: int,
    duration_ms: float,
    success: bool = True,
    category: str = "search-query",
    age_minutes: float = 1,
) -> ExecutionMetric:
    start = NOW - timedelta(minutes=age_minutes)
    return ExecutionMetric(
        id=f"m-{index}",
        category=category,
        operation_id=f"op-{index}",
        start_time=start,
        end_time=start + timedelta(milliseconds=duration_ms),
        duration_ms=duration_ms,
        success=success,
    )


def role_metric(
    index: int,
    duration_ms: float,
    role: str = "architect",
    age_hours: float = 1,
    success: bool = True,
    **metadata: object,
) -> ExecutionMetric:
    start = NOW - timedelta(hours=age_hours)
    return ExecutionMetric(
        id=f"r-{index}",
        category="agent-call",
        operation_id=f"op-{index}",
        start_time=start,
        end_time=start + timedelta(milliseconds=duration_ms),
        duration_ms=duration_ms,
        success=success,
        error_kind=None if success else "timeout",
        metadata=MetricMetadata(agent_role=role, **metadata),
    )


class TestPercentile:
    """Test R-7 linear interpolation."""

    def test_interpolates_between_order_statistics(self) -> None:
        assert percentile([1, 2, 3, 4], 50) == pytest.approx(2.5)
        assert percentile([10, 20, 30, 40, 50], 90) == pytest.approx(46)

    def test_extremes(self) -> None:
        values = [3.0, 7.0, 9.0]
        assert percentile(values, 0) == 3.0
        assert percentile(values, 100) == 9.0

    def test_single_and_empty(self) -> None:
        assert percentile([42.0], 95) == 42.0
        assert percentile([], 50) == 0.0

    def test_monotonic_for_random_samples(self) -> None:
        """Test p50 <= p95 <= p99 for non-constant samples."""
        rng = random.Random(1234)
        for _ in range(200):
            size = rng.randint(3, 60)
            values = sorted(rng.uniform(1, 5000) for _ in range(size))
            p50 = percentile(values, 50)
            p95 = percentile(values, 95)
            p99 = percentile(values, 99)
            assert p50 <= p95 <= p99


class TestComputeStats:
    """Test aggregation over a window."""

    def test_aggregates(self) -> None:
        metrics = [
            completed_metric(1, 100),
            completed_metric(2, 200),
            completed_metric(3, 300, success=False),
            completed_metric(4, 400),
        ]

        stats = compute_stats(metrics, "search-query", 60, NOW)

        assert stats is not None
        assert stats.count == 4
        assert stats.success_count == 3
        assert stats.error_count == 1
        assert stats.success_rate == pytest.approx(0.75)
        assert stats.error_rate == pytest.approx(0.25)
        assert stats.mean_ms == pytest.approx(250)
        assert stats.median_ms == pytest.approx(250)
        assert stats.min_ms == 100
        assert stats.max_ms == 400
        assert stats.percentiles.p75 == pytest.approx(325)
        assert stats.throughput == pytest.approx(4 / 3600)
        assert stats.time_range.end == NOW

    def test_excludes_other_categories_and_old_metrics(self) -> None:
        metrics = [
            completed_metric(1, 100),
            completed_metric(2, 100, category="agent-call"),
            completed_metric(3, 100, age_minutes=90),
        ]

        stats = compute_stats(metrics, "search-query", 60, NOW)

        assert stats is not None
        assert stats.count == 1

    def test_ignores_incomplete_metrics(self) -> None:
        pending = ExecutionMetric(
            id="m-pending",
            category="search-query",
            operation_id="op",
            start_time=NOW - timedelta(minutes=1),
        )
        assert compute_stats([pending], "search-query", 60, NOW) is None

    def test_empty_window(self) -> None:
        assert compute_stats([], "search-query", 60, NOW) is None


class TestStatisticsEngine:
    """Test target checks, summaries and health."""

    def test_check_target(self, services: TelemetryServices) -> None:
        """Test severity bands against the 30s synthesis target."""
        within = services.stats.check_target("synthesis", 30000)
        warning = services.stats.check_target("synthesis", 60000)
        critical = services.stats.check_target("synthesis", 70000)

        assert within.meets_target is True
        assert within.severity == "good"
        assert warning.meets_target is False
        assert warning.deviation == pytest.approx(1.0)
        assert warning.severity == "warning"
        assert critical.severity == "critical"

    def test_check_target_unknown_category(self, services: TelemetryServices) -> None:
        check = services.stats.check_target("unknown-op", 99999)
        assert check.meets_target is True
        assert check.target_ms == 0

    def test_get_stats_via_container(self, services: TelemetryServices) -> None:
        for duration in (100, 200, 300):
            services.record_operation("cache-operation", "op", duration)

        stats = services.get_stats("cache-operation")

        assert stats is not None
        assert stats.count == 3
        assert stats.mean_ms == pytest.approx(200)
        assert services.get_stats("vector-search") is None

    def test_summary_compliance_and_recommendations(self, services: TelemetryServices) -> None:
        """Test that a p95 over target lowers compliance and yields advice."""
        for _ in range(5):
            services.record_operation("cache-operation", "op", 2000)

        summary = services.stats.summary()

        category = summary.by_category["cache-operation"]
        assert category.count == 5
        assert category.target_compliance == pytest.approx(0.5)
        assert summary.overall.total_operations == 5
        assert summary.overall.p95_ms == pytest.approx(2000)
        assert any(
            r.startswith("cache-operation: P95 response time exceeds target by 100.0%")
            for r in summary.recommendations
        )

    def test_summary_error_rate_recommendation(self, services: TelemetryServices) -> None:
        services.record_operation("search-query", "op", 100)
        services.record_operation("search-query", "op", 100, success=False)

        summary = services.stats.summary()

        assert any("High error rate of 50.0%" in r for r in summary.recommendations)

    def test_health_healthy_when_idle(self, services: TelemetryServices) -> None:
        health = services.stats.health()
        assert health.status == "healthy"
        assert health.active_alerts == 0

    def test_health_degraded_with_many_alerts(self, services: TelemetryServices) -> None:
        """Test that more than two non-critical alerts degrade health."""
        services.record_operation(
            "agent-call",
            "op",
            45000,
            metadata={"agent_role": "architect", "confidence": 0.4, "estimated_cost": 0.5},
        )

        health = services.stats.health()

        assert health.active_alerts == 3
        assert health.status == "degraded"

    def test_health_unhealthy_with_critical_alert(self, services: TelemetryServices) -> None:
        for _ in range(10):
            services.record_operation("search-query", "op", 100, success=False)

        health = services.stats.health()

        assert health.status == "unhealthy"

    def test_health_reports_internal_errors(
        self, services: TelemetryServices, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        def explode(*args: object, **kwargs: object) -> None:
            raise RuntimeError("stats down")

        monkeypatch.setattr(services.stats, "summary", explode)

        health = services.stats.health()

        assert health.status == "unhealthy"
        assert health.error == "RuntimeError: stats down"

    def test_snapshot(self, services: TelemetryServices) -> None:
        services.record_operation("search-query", "op", 100)

        snapshot = services.export_snapshot()

        assert len(snapshot.metrics) == 1
        assert "search-query" in snapshot.stats
        assert snapshot.alerts == []


class TestAgentSummary:
    """Test per-role cost, quality and trend aggregation over 24 hours."""

    def test_aggregates_cost_quality_and_trends(self) -> None:
        """Test a role that got slower, less confident and more expensive."""
        older_usage = {"estimated_cost": 0.02, "prompt_tokens": 100, "completion_tokens": 50}
        metrics = [
            role_metric(1, 1000, age_hours=20, confidence=0.9, retry_count=0, **older_usage),
            role_metric(2, 1000, age_hours=18, confidence=0.9, **older_usage),
            role_metric(
                3,
                2000,
                age_hours=2,
                confidence=0.6,
                estimated_cost=0.04,
                prompt_tokens=300,
                completion_tokens=100,
                retry_count=1,
            ),
            role_metric(4, 2000, age_hours=1, success=False, retry_count=2),
        ]

        summary = compute_agent_summary(metrics, "architect", 24 * 60, NOW, Settings())

        assert summary is not None
        assert summary.stats.count == 4
        assert summary.stats.category == "architect"
        assert summary.stats.success_rate == pytest.approx(0.75)
        assert summary.total_tokens == 700
        assert summary.total_cost == pytest.approx(0.08)
        assert summary.average_cost == pytest.approx(0.02)
        assert summary.average_retries == pytest.approx(0.75)
        assert summary.average_confidence == pytest.approx(0.8)
        assert summary.error_rates == {"timeout": pytest.approx(0.25)}
        assert summary.min_success_rate == pytest.approx(0.95)
        assert summary.meets_success_target is False
        assert summary.performance_trend == "degrading"
        assert summary.quality_trend == "degrading"
        assert summary.cost_trend == "increasing"

    def test_improving_and_stable_trends(self) -> None:
        metrics = [
            role_metric(1, 2000, role="putter", age_hours=20, confidence=0.8),
            role_metric(2, 1000, role="putter", age_hours=2, confidence=0.82),
        ]

        summary = compute_agent_summary(metrics, "putter", 24 * 60, NOW, Settings())

        assert summary is not None
        assert summary.performance_trend == "improving"
        assert summary.quality_trend == "stable"
        assert summary.cost_trend == "stable"
        assert summary.total_cost == 0.0
        assert summary.meets_success_target is True

    def test_cost_estimated_from_tokens(self) -> None:
        metrics = [role_metric(1, 500, prompt_tokens=4000, completion_tokens=1000)]

        summary = compute_agent_summary(metrics, "architect", 24 * 60, NOW, Settings())

        assert summary is not None
        assert summary.total_cost == pytest.approx(0.1)

    def test_only_reported_role_in_window(self) -> None:
        metrics = [
            role_metric(1, 500, role="gatherer"),
            role_metric(2, 500, role="gatherer", age_hours=30),
            completed_metric(3, 500, category="agent-call"),
        ]

        summary = compute_agent_summary(metrics, "gatherer", 24 * 60, NOW, Settings())

        assert summary is not None
        assert summary.stats.count == 1
        assert compute_agent_summary(metrics, "specialist", 24 * 60, NOW, Settings()) is None

    def test_role_without_success_minimum(self) -> None:
        metrics = [role_metric(1, 500, role="scout", success=False)]

        summary = compute_agent_summary(metrics, "scout", 24 * 60, NOW, Settings())

        assert summary is not None
        assert summary.min_success_rate is None
        assert summary.meets_success_target is True


class TestAgentReport:
    def test_report_recommendations(self, services: TelemetryServices) -> None:
        """Test response time, success rate and cost advice per role."""
        services.record_operation(
            "agent-call", "op-1", 30000, metadata={"agent_role": "architect", "estimated_cost": 0.5}
        )
        services.record_operation("agent-call", "op-2", 100, metadata={"agent_role": "gatherer"})
        services.record_operation(
            "agent-call", "op-3", 100, success=False, metadata={"agent_role": "gatherer"}
        )
        services.record_operation("search-query", "op-4", 100)

        report = services.get_agent_report()

        assert list(report.agents) == ["architect", "gatherer"]
        assert report.recommendations == [
            "architect: Response time exceeds target (30000ms > 20000ms)",
            "architect: Cost per execution too high ($0.500 > $0.10)",
            "gatherer: Success rate below target (50.0% < 90.0%)",
        ]

    def test_healthy_roles_have_no_advice(self, services: TelemetryServices) -> None:
        services.record_operation("agent-call", "op-1", 100, metadata={"agent_role": "putter"})

        report = services.get_agent_report()

        assert report.agents["putter"].meets_success_target is True
        assert report.recommendations == []

    def test_snapshot_includes_agents(self, services: TelemetryServices) -> None:
        services.record_operation(
            "agent-call", "op-1", 100, metadata={"agent_role": "specialist", "prompt_tokens": 10}
        )

        snapshot = services.export_snapshot()

        assert snapshot.agents["specialist"].total_tokens == 10
