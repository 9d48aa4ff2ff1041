"""Statistics engine - aggregates over a rolling window of execution metrics."""

import logging
from collections.abc import Iterable
from datetime import datetime, timedelta
from math import ceil, floor
from typing import TYPE_CHECKING

from tripsynth.app.config import Settings, get_settings
from tripsynth.app.models.common import AlertKind, Severity, TimeRange
from tripsynth.app.models.telemetry import (
    AgentReport,
    AgentSummary,
    Alert,
    CategoryPerformance,
    CostTrend,
    ExecutionMetric,
    OverallPerformance,
    Percentiles,
    PerformanceSummary,
    Stats,
    TargetCheck,
    TelemetryHealth,
    TelemetrySnapshot,
    Trend,
)
from tripsynth.app.utils.clock import Clock, utc_now

if TYPE_CHECKING:
    from tripsynth.app.telemetry.alerting import AlertingEngine
    from tripsynth.app.telemetry.collector import TelemetryCollector

logger = logging.getLogger(__name__)

HIGH_ERROR_RATE = 0.05
LOW_THROUGHPUT_OPS_PER_SEC = 0.1
MIN_TARGET_COMPLIANCE = 0.7
DEGRADED_ALERT_COUNT = 2
PERFORMANCE_TARGET_KINDS = (AlertKind.target_exceeded, AlertKind.slow_response)

# Trend labels keyed by the direction of change between window halves
PERFORMANCE_TRENDS: dict[int, Trend] = {1: "degrading", 0: "stable", -1: "improving"}
QUALITY_TRENDS: dict[int, Trend] = {1: "improving", 0: "stable", -1: "degrading"}
COST_TRENDS: dict[int, CostTrend] = {1: "increasing", 0: "stable", -1: "decreasing"}


def percentile(sorted_values: list[float], p: float) -> float:
    """Percentile by linear interpolation between order statistics (R-7).

    Args:
        sorted_values: Ascending sample
        p: Percentile in [0, 100]

    Returns:
        Interpolated value, or 0.0 for an empty sample
    """
    if not sorted_values:
        return 0.0

    index = (p / 100) * (len(sorted_values) - 1)
    lower = floor(index)
    upper = ceil(index)
    if lower == upper:
        return sorted_values[lower]

    weight = index - lower
    return sorted_values[lower] * (1 - weight) + sorted_values[upper] * weight


def compute_stats(
    metrics: Iterable[ExecutionMetric],
    category: str,
    window_minutes: float,
    now: datetime,
) -> Stats | None:
    """Aggregate completed metrics of ``category`` started inside the window."""
    window_start = now - timedelta(minutes=window_minutes)
    relevant = [
        m
        for m in metrics
        if m.category == category
        and m.completed
        and m.duration_ms is not None
        and m.start_time >= window_start
    ]
    if not relevant:
        return None
    return _aggregate(relevant, category, window_start, now, window_minutes)


def _aggregate(
    relevant: list[ExecutionMetric],
    label: str,
    window_start: datetime,
    now: datetime,
    window_minutes: float,
) -> Stats:
    durations = sorted(m.duration_ms for m in relevant if m.duration_ms is not None)
    count = len(relevant)
    success_count = sum(1 for m in relevant if m.success)
    error_count = count - success_count
    window_seconds = max(window_minutes * 60, 1e-9)

    return Stats(
        category=label,
        time_range=TimeRange(start=window_start, end=now),
        count=count,
        success_count=success_count,
        error_count=error_count,
        success_rate=success_count / count,
        error_rate=error_count / count,
        mean_ms=sum(durations) / count,
        median_ms=percentile(durations, 50),
        min_ms=durations[0],
        max_ms=durations[-1],
        percentiles=Percentiles(
            p50=percentile(durations, 50),
            p75=percentile(durations, 75),
            p90=percentile(durations, 90),
            p95=percentile(durations, 95),
            p99=percentile(durations, 99),
        ),
        throughput=count / window_seconds,
    )


def _mean(values: list[float]) -> float | None:
    return sum(values) / len(values) if values else None


def _direction(recent: list[float], older: list[float], change: float) -> int:
    """+1 when the recent half rose by more than ``change``, -1 when it fell, else 0."""
    recent_mean = _mean(recent)
    older_mean = _mean(older)
    if recent_mean is None or older_mean is None or older_mean <= 0:
        return 0

    ratio = recent_mean / older_mean
    if ratio > 1 + change:
        return 1
    if ratio < 1 - change:
        return -1
    return 0


def compute_agent_summary(
    metrics: Iterable[ExecutionMetric],
    role: str,
    window_minutes: float,
    now: datetime,
    settings: Settings,
) -> AgentSummary | None:
    """Summarize completed metrics reported by one agent role.

    Trends compare the newer half of the window with the older half: slower
    durations degrade performance, lower confidence degrades quality.

    Args:
        metrics: Retained metrics
        role: Agent role reported in ``metadata.agent_role``
        window_minutes: Look-back window
        now: End of the window
        settings: Cost rate, success minimums and trend sensitivity

    Returns:
        AgentSummary, or None when the role has no completed metrics in the window
    """
    window_start = now - timedelta(minutes=window_minutes)
    relevant = [
        m
        for m in metrics
        if m.metadata.agent_role == role
        and m.completed
        and m.duration_ms is not None
        and m.start_time >= window_start
    ]
    if not relevant:
        return None

    stats = _aggregate(relevant, role, window_start, now, window_minutes)
    count = len(relevant)
    successful = [m for m in relevant if m.success]
    rate = settings.cost_per_token

    error_counts: dict[str, int] = {}
    for m in relevant:
        if not m.success:
            kind = m.error_kind or "unknown"
            error_counts[kind] = error_counts.get(kind, 0) + 1

    total_cost = sum(m.cost(rate) or 0.0 for m in relevant)
    min_success_rate = settings.role_min_success_rates.get(role)

    midpoint = now - timedelta(minutes=window_minutes / 2)
    recent = [m for m in relevant if m.start_time >= midpoint]
    older = [m for m in relevant if m.start_time < midpoint]
    change = settings.trend_change_ratio

    def durations(ms: list[ExecutionMetric]) -> list[float]:
        return [m.duration_ms for m in ms if m.duration_ms is not None]

    def confidences(ms: list[ExecutionMetric]) -> list[float]:
        return [
            m.metadata.confidence for m in ms if m.success and m.metadata.confidence is not None
        ]

    def costs(ms: list[ExecutionMetric]) -> list[float]:
        return [c for c in (m.cost(rate) for m in ms) if c is not None]

    performance = _direction(durations(recent), durations(older), change)
    quality = _direction(confidences(recent), confidences(older), change)
    cost = _direction(costs(recent), costs(older), change)

    return AgentSummary(
        role=role,
        stats=stats,
        average_confidence=_mean(confidences(relevant)),
        average_quality=_mean(
            [m.metadata.quality for m in successful if m.metadata.quality is not None]
        ),
        total_tokens=sum(m.total_tokens for m in relevant),
        total_cost=total_cost,
        average_cost=total_cost / count,
        average_retries=sum(m.metadata.retry_count or 0 for m in relevant) / count,
        error_rates={kind: n / count for kind, n in sorted(error_counts.items())},
        min_success_rate=min_success_rate,
        meets_success_target=min_success_rate is None or stats.success_rate >= min_success_rate,
        performance_trend=PERFORMANCE_TRENDS[performance],
        quality_trend=QUALITY_TRENDS[quality],
        cost_trend=COST_TRENDS[cost],
    )


class StatisticsEngine:
    """On-demand statistics, summaries and health over the collector's metrics."""

    def __init__(
        self,
        collector: "TelemetryCollector",
        alerting: "AlertingEngine | None" = None,
        settings: Settings | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._collector = collector
        self._alerting = alerting
        self._settings = settings or get_settings()
        self._clock = clock or utc_now

    def stats(self, category: str, window_minutes: float = 60) -> Stats | None:
        """Stats for one category, or None when the window holds no metrics."""
        return compute_stats(self._collector.snapshot(), category, window_minutes, self._clock())

    def all_stats(self, window_minutes: float = 60) -> dict[str, Stats]:
        """Stats for every category that has metrics in the window."""
        metrics = self._collector.snapshot()
        now = self._clock()
        results: dict[str, Stats] = {}
        for category in sorted({m.category for m in metrics}):
            stat = compute_stats(metrics, category, window_minutes, now)
            if stat is not None:
                results[category] = stat
        return results

    def target_for(self, category: str) -> float | None:
        target = self._settings.operation_targets_ms.get(category)
        return float(target) if target else None

    def check_target(self, category: str, duration_ms: float) -> TargetCheck:
        """Classify one duration against the category target."""
        target = self.target_for(category)
        if target is None:
            return TargetCheck(meets_target=True, target_ms=0, deviation=0, severity="good")

        deviation = (duration_ms - target) / target
        severity = "good"
        if deviation > self._settings.target_critical_deviation:
            severity = "critical"
        elif deviation > self._settings.target_warning_deviation:
            severity = "warning"

        return TargetCheck(
            meets_target=duration_ms <= target,
            target_ms=target,
            deviation=deviation,
            severity=severity,
        )

    def summary(self, window_minutes: float = 60) -> PerformanceSummary:
        """Roll-up across all categories with target compliance and advice."""
        all_stats = self.all_stats(window_minutes)
        metrics = self._collector.snapshot()
        window_start = self._clock() - timedelta(minutes=window_minutes)

        total = 0
        successful = 0
        weighted_mean = 0.0
        by_category: dict[str, CategoryPerformance] = {}
        for category, stat in all_stats.items():
            total += stat.count
            successful += stat.success_count
            weighted_mean += stat.mean_ms * stat.count

            target = self.target_for(category)
            p95 = stat.percentiles.p95
            compliance = 1.0 if target is None or p95 <= target else target / p95
            by_category[category] = CategoryPerformance(
                count=stat.count,
                success_rate=stat.success_rate,
                mean_ms=stat.mean_ms,
                target_compliance=compliance,
            )

        all_durations = sorted(
            m.duration_ms
            for m in metrics
            if m.duration_ms is not None and m.start_time >= window_start
        )
        active = self._alerting.active_alerts() if self._alerting else []

        return PerformanceSummary(
            overall=OverallPerformance(
                total_operations=total,
                success_rate=successful / total if total else 0.0,
                mean_ms=weighted_mean / total if total else 0.0,
                p95_ms=percentile(all_durations, 95),
            ),
            by_category=by_category,
            alerts=active,
            recommendations=self._recommendations(all_stats, active),
        )

    def _recommendations(
        self, all_stats: dict[str, Stats], active: list[Alert]
    ) -> list[str]:
        recommendations: list[str] = []

        for category, stat in all_stats.items():
            target = self.target_for(category)
            p95 = stat.percentiles.p95
            if target is not None and p95 > target:
                exceedance = (p95 - target) / target * 100
                recommendations.append(
                    f"{category}: P95 response time exceeds target by {exceedance:.1f}% "
                    f"({p95:.0f}ms vs {target:.0f}ms target)"
                )
            if stat.error_rate > HIGH_ERROR_RATE:
                recommendations.append(
                    f"{category}: High error rate of {stat.error_rate * 100:.1f}% "
                    "- investigate failures"
                )
            if stat.throughput < LOW_THROUGHPUT_OPS_PER_SEC:
                recommendations.append(
                    f"{category}: Low throughput of {stat.throughput:.2f} ops/sec "
                    "- consider optimization"
                )

        for alert in active:
            details = alert.details
            if alert.kind in PERFORMANCE_TARGET_KINDS and details.target:
                over = details.current_value / details.target * 100
                recommendations.append(
                    f"Optimize {alert.subject} operations - currently {over:.1f}% of target"
                )
            elif alert.kind == AlertKind.performance_degradation:
                recommendations.append(
                    f"Investigate performance degradation in {alert.subject} "
                    "- check for bottlenecks"
                )
            elif alert.kind == AlertKind.high_error_rate:
                recommendations.append(
                    f"Address error rate issues in {alert.subject} "
                    f"- {details.current_value * 100:.1f}% errors"
                )

        return recommendations

    def agent_summary(self, role: str, window_minutes: float | None = None) -> AgentSummary | None:
        """Summary for one agent role, or None when it has no metrics in the window."""
        window = window_minutes or self._settings.agent_summary_window_minutes
        return compute_agent_summary(
            self._collector.snapshot(), role, window, self._clock(), self._settings
        )

    def agent_summaries(self, window_minutes: float | None = None) -> dict[str, AgentSummary]:
        """Summaries for every agent role that reported metrics in the window."""
        window = window_minutes or self._settings.agent_summary_window_minutes
        metrics = self._collector.snapshot()
        now = self._clock()
        roles = sorted({m.metadata.agent_role for m in metrics if m.metadata.agent_role})

        results: dict[str, AgentSummary] = {}
        for role in roles:
            summary = compute_agent_summary(metrics, role, window, now, self._settings)
            if summary is not None:
                results[role] = summary
        return results

    def agent_report(self, window_minutes: float | None = None) -> AgentReport:
        """Per-role summaries plus response time, success rate and cost advice."""
        summaries = self.agent_summaries(window_minutes)
        max_cost = self._settings.max_cost_per_request
        recommendations: list[str] = []

        for role, summary in summaries.items():
            target = self.target_for(role)
            p95 = summary.stats.percentiles.p95
            if target is not None and p95 > target:
                recommendations.append(
                    f"{role}: Response time exceeds target ({p95:.0f}ms > {target:.0f}ms)"
                )
            if not summary.meets_success_target and summary.min_success_rate is not None:
                recommendations.append(
                    f"{role}: Success rate below target "
                    f"({summary.stats.success_rate * 100:.1f}% < "
                    f"{summary.min_success_rate * 100:.1f}%)"
                )
            if summary.average_cost > max_cost:
                recommendations.append(
                    f"{role}: Cost per execution too high "
                    f"(${summary.average_cost:.3f} > ${max_cost:.2f})"
                )

        return AgentReport(agents=summaries, recommendations=recommendations)

    def health(self) -> TelemetryHealth:
        """healthy / degraded / unhealthy from active alerts and target compliance."""
        try:
            summary = self.summary(window_minutes=5)
            active = summary.alerts

            status = "healthy"
            if any(a.severity == Severity.critical for a in active):
                status = "unhealthy"
            elif len(active) > DEGRADED_ALERT_COUNT:
                status = "degraded"

            if status == "healthy" and summary.by_category:
                compliance = sum(
                    c.target_compliance for c in summary.by_category.values()
                ) / len(summary.by_category)
                if compliance < MIN_TARGET_COMPLIANCE:
                    status = "degraded"

            return TelemetryHealth(
                status=status,
                metrics_collected=self._collector.size,
                active_alerts=len(active),
                mean_ms=summary.overall.mean_ms,
            )
        except Exception as e:
            logger.exception("Telemetry health check failed")
            return TelemetryHealth(
                status="unhealthy",
                metrics_collected=self._collector.size,
                active_alerts=len(self._alerting.active_alerts()) if self._alerting else 0,
                mean_ms=0.0,
                error=f"{type(e).__name__}: {e}",
            )

    def snapshot(self) -> TelemetrySnapshot:
        """Every retained metric and alert (resolved included) plus hourly and agent stats."""
        return TelemetrySnapshot(
            metrics=self._collector.snapshot(),
            stats=self.all_stats(),
            alerts=self._alerting.all_alerts() if self._alerting else [],
            timestamp=self._clock(),
            agents=self.agent_summaries(),
        )
