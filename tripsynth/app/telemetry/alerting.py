"""Alerting engine - threshold checks over completed metrics.

Each completed metric is checked once against duration targets, a short-window
baseline, the per-category failure streak, quality scores, cost and the rolling
error rate. Proposals are deduplicated against unresolved alerts of the same
kind and subject. Alerts are resolved manually only.
"""

import logging
import threading
import uuid
from collections.abc import Sequence
from datetime import datetime, timedelta

from tripsynth.app.config import Settings, get_settings
from tripsynth.app.models.common import AlertKind, Severity, TimeRange
from tripsynth.app.models.telemetry import Alert, AlertDetails, ExecutionMetric
from tripsynth.app.utils.clock import Clock, utc_now
from tripsynth.app.utils.logging import StructuredTelemetryLogger
from tripsynth.app.utils.metrics import TelemetryMetrics

logger = logging.getLogger(__name__)

# Kinds suppressed for the short performance window instead of the default one
PERFORMANCE_KINDS = frozenset(
    {AlertKind.target_exceeded, AlertKind.performance_degradation, AlertKind.slow_response}
)

# Kinds tracked per operation category rather than per agent role
CATEGORY_KINDS = frozenset({AlertKind.consecutive_failures, AlertKind.high_error_rate})

RECOMMENDATIONS: dict[AlertKind, list[str]] = {
    AlertKind.slow_response: [
        "Optimize prompts for conciseness",
        "Consider using a faster model variant",
        "Check for API rate limiting issues",
    ],
    AlertKind.target_exceeded: [
        "Optimize prompts for conciseness",
        "Consider using a faster model variant",
        "Check for API rate limiting issues",
    ],
    AlertKind.performance_degradation: [
        "Compare with the previous deployment for regressions",
        "Check upstream provider latency",
        "Review cache hit rates",
    ],
    AlertKind.consecutive_failures: [
        "Check agent configuration and API keys",
        "Review recent changes to agent prompts",
        "Consider switching to backup agent model",
    ],
    AlertKind.quality_degradation: [
        "Review and improve agent prompts",
        "Consider adding more context or examples",
        "Validate training data quality",
    ],
    AlertKind.high_cost: [
        "Optimize prompts to reduce token usage",
        "Consider using smaller model variants",
        "Implement response caching where appropriate",
    ],
    AlertKind.high_error_rate: [
        "Inspect the most frequent error kinds",
        "Check upstream provider status",
        "Add retries with backoff for transient failures",
    ],
}


class AlertingEngine:
    """Owns the alert list and per-category failure streaks."""

    def __init__(
        self,
        settings: Settings | None = None,
        metrics: TelemetryMetrics | None = None,
        structured_logger: StructuredTelemetryLogger | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._metrics = metrics or TelemetryMetrics()
        self._log = structured_logger or StructuredTelemetryLogger(
            slow_operation_ms=self._settings.slow_operation_ms,
            very_slow_operation_ms=self._settings.very_slow_operation_ms,
        )
        self._clock = clock or utc_now
        self._lock = threading.Lock()
        self._alerts: list[Alert] = []
        self._failure_streaks: dict[str, int] = {}

    def target_for(self, metric: ExecutionMetric) -> float | None:
        """Duration target for the metric's subject, falling back to its category."""
        targets = self._settings.operation_targets_ms
        target = targets.get(metric.subject) or targets.get(metric.category)
        return float(target) if target else None

    def evaluate(self, metric: ExecutionMetric, history: Sequence[ExecutionMetric]) -> list[Alert]:
        """Run every check for one completed metric.

        Args:
            metric: The metric that just completed
            history: Retained metrics used for baselines and error rates

        Returns:
            Alerts newly raised for this metric (after deduplication)
        """
        if not metric.completed:
            return []

        now = self._clock()
        with self._lock:
            streak = self._update_streak_locked(metric)

        proposals = [
            self._check_target(metric),
            self._check_degradation(metric, history, now),
            self._check_consecutive_failures(metric, streak),
            self._check_quality(metric),
            self._check_cost(metric),
            self._check_error_rate(metric, history, now),
        ]

        raised: list[Alert] = []
        with self._lock:
            self._gc_locked(now)
            for proposal in proposals:
                if proposal is None or self._is_duplicate_locked(proposal, now):
                    continue
                self._alerts.append(proposal)
                raised.append(proposal)

        for alert in raised:
            self._metrics.inc_alert(alert.kind.value, alert.severity.value)
            self._log.log_alert(alert)
        return raised

    def resolve(self, alert_id: str) -> bool:
        """Mark an unresolved alert resolved.

        Returns:
            False when no unresolved alert has that id
        """
        now = self._clock()
        with self._lock:
            self._gc_locked(now)
            for index, alert in enumerate(self._alerts):
                if alert.id != alert_id or alert.resolved:
                    continue
                self._alerts[index] = alert.model_copy(
                    update={"resolved": True, "resolved_at": now}
                )
                logger.info(f"Alert resolved: {alert.kind.value} ({alert.subject})")
                return True
        return False

    def get(self, alert_id: str) -> Alert | None:
        with self._lock:
            return next((a for a in self._alerts if a.id == alert_id), None)

    def active_alerts(self) -> list[Alert]:
        """Unresolved alerts, oldest first."""
        with self._lock:
            self._gc_locked(self._clock())
            return [a for a in self._alerts if not a.resolved]

    def all_alerts(self) -> list[Alert]:
        """Every retained alert, resolved ones included."""
        with self._lock:
            self._gc_locked(self._clock())
            return list(self._alerts)

    def consecutive_failures(self, category: str) -> int:
        with self._lock:
            return self._failure_streaks.get(category, 0)

    def clear(self) -> None:
        with self._lock:
            self._alerts.clear()
            self._failure_streaks.clear()

    def _update_streak_locked(self, metric: ExecutionMetric) -> int:
        if metric.success:
            self._failure_streaks[metric.category] = 0
            return 0
        streak = self._failure_streaks.get(metric.category, 0) + 1
        self._failure_streaks[metric.category] = streak
        return streak

    def _check_target(self, metric: ExecutionMetric) -> Alert | None:
        target = self.target_for(metric)
        duration = metric.duration_ms or 0.0
        if target is None:
            return None

        threshold = target * self._settings.target_exceeded_multiplier
        if duration <= threshold:
            return None

        return self._alert(
            AlertKind.target_exceeded,
            Severity.high,
            metric,
            f"{metric.subject} exceeded its target: {duration:.0f}ms (target {target:.0f}ms)",
            current_value=duration,
            threshold=threshold,
            target=target,
        )

    def _check_degradation(
        self, metric: ExecutionMetric, history: Sequence[ExecutionMetric], now: datetime
    ) -> Alert | None:
        window_start = now - timedelta(minutes=self._settings.degradation_window_minutes)
        baseline = [
            m.duration_ms
            for m in history
            if m.id != metric.id
            and m.category == metric.category
            and m.completed
            and m.duration_ms is not None
            and m.start_time >= window_start
        ]
        if len(baseline) < self._settings.degradation_min_samples:
            return None

        mean = sum(baseline) / len(baseline)
        threshold = mean * self._settings.degradation_threshold
        duration = metric.duration_ms or 0.0
        if mean <= 0 or duration < threshold:
            return None

        return self._alert(
            AlertKind.performance_degradation,
            Severity.medium,
            metric,
            f"{metric.category} performance degraded: {duration:.0f}ms vs {mean:.0f}ms baseline",
            current_value=duration,
            threshold=threshold,
            target=mean,
            start=window_start,
            affected=len(baseline) + 1,
        )

    def _check_consecutive_failures(self, metric: ExecutionMetric, streak: int) -> Alert | None:
        threshold = self._settings.consecutive_failure_threshold
        if streak < threshold:
            return None

        return self._alert(
            AlertKind.consecutive_failures,
            Severity.high,
            metric,
            f"{metric.category} has {streak} consecutive failures",
            current_value=streak,
            threshold=threshold,
            affected=streak,
        )

    def _check_quality(self, metric: ExecutionMetric) -> Alert | None:
        confidence = metric.metadata.confidence
        quality = metric.metadata.quality

        if confidence is not None and confidence < self._settings.min_confidence_score:
            return self._alert(
                AlertKind.quality_degradation,
                Severity.medium,
                metric,
                f"{metric.subject} confidence below threshold: {confidence:.2f}",
                current_value=confidence,
                threshold=self._settings.min_confidence_score,
            )
        if quality is not None and quality < self._settings.min_quality_score:
            return self._alert(
                AlertKind.quality_degradation,
                Severity.medium,
                metric,
                f"{metric.subject} quality below threshold: {quality:.2f}",
                current_value=quality,
                threshold=self._settings.min_quality_score,
            )
        return None

    def _check_cost(self, metric: ExecutionMetric) -> Alert | None:
        cost = metric.cost(self._settings.cost_per_token)
        if cost is None or cost <= self._settings.max_cost_per_request:
            return None

        return self._alert(
            AlertKind.high_cost,
            Severity.low,
            metric,
            f"{metric.subject} execution cost exceeds threshold (${cost:.4f})",
            current_value=cost,
            threshold=self._settings.max_cost_per_request,
        )

    def _check_error_rate(
        self, metric: ExecutionMetric, history: Sequence[ExecutionMetric], now: datetime
    ) -> Alert | None:
        window_start = now - timedelta(minutes=self._settings.error_rate_window_minutes)
        window = [
            m
            for m in history
            if m.category == metric.category and m.completed and m.start_time >= window_start
        ]
        if len(window) < self._settings.error_rate_min_samples:
            return None

        error_rate = sum(1 for m in window if not m.success) / len(window)
        if error_rate <= self._settings.error_rate_alert_threshold:
            return None

        severity = Severity.medium
        if error_rate >= self._settings.error_rate_critical_threshold:
            severity = Severity.critical

        return self._alert(
            AlertKind.high_error_rate,
            severity,
            metric,
            f"{metric.category} error rate at {error_rate * 100:.1f}% "
            f"over {len(window)} operations",
            current_value=error_rate,
            threshold=self._settings.error_rate_alert_threshold,
            start=window_start,
            affected=len(window),
        )

    def _alert(
        self,
        kind: AlertKind,
        severity: Severity,
        metric: ExecutionMetric,
        message: str,
        current_value: float,
        threshold: float,
        target: float | None = None,
        start: datetime | None = None,
        affected: int = 1,
    ) -> Alert:
        subject = metric.category if kind in CATEGORY_KINDS else metric.subject
        end = metric.end_time or self._clock()
        return Alert(
            id=f"alert-{uuid.uuid4()}",
            kind=kind,
            severity=severity,
            subject=subject,
            message=message,
            details=AlertDetails(
                current_value=current_value,
                threshold=threshold,
                target=target,
                time_range=TimeRange(start=start or metric.start_time, end=end),
                affected_operations=affected,
            ),
            recommendations=list(RECOMMENDATIONS[kind]),
            created_at=self._clock(),
        )

    def _dedup_window(self, kind: AlertKind) -> timedelta:
        if kind in PERFORMANCE_KINDS:
            return timedelta(minutes=self._settings.performance_alert_dedup_minutes)
        return timedelta(minutes=self._settings.alert_dedup_minutes)

    def _is_duplicate_locked(self, proposal: Alert, now: datetime) -> bool:
        window = self._dedup_window(proposal.kind)
        return any(
            not a.resolved
            and a.kind == proposal.kind
            and a.subject == proposal.subject
            and now - a.created_at < window
            for a in self._alerts
        )

    def _gc_locked(self, now: datetime) -> None:
        cutoff = now - timedelta(minutes=self._settings.resolved_alert_retention_minutes)
        self._alerts = [
            a
            for a in self._alerts
            if not (a.resolved and a.resolved_at is not None and a.resolved_at <= cutoff)
        ]
