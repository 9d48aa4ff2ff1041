"""Telemetry collector - records the start and completion of timed operations.

Metrics are immutable records kept in an insertion-ordered id -> metric index
under a single lock. Completion replaces the stored record with a completed
copy exactly once. Every write evicts records that ended (or, while pending,
started) before the retention window. Completed metrics are forwarded to the
export sinks and the alerting engine outside the lock; faults there are logged
and never reach the caller.
"""

import logging
import threading
import uuid
from collections.abc import Mapping
from datetime import datetime, timedelta
from typing import Any

from tripsynth.app.config import Settings, get_settings
from tripsynth.app.models.telemetry import ExecutionMetric, MetricMetadata
from tripsynth.app.telemetry.alerting import AlertingEngine
from tripsynth.app.utils.clock import Clock, utc_now
from tripsynth.app.utils.logging import StructuredTelemetryLogger
from tripsynth.app.utils.metrics import TelemetryMetrics

logger = logging.getLogger(__name__)


def _merge_metadata(base: MetricMetadata, extra: Mapping[str, Any] | None) -> MetricMetadata:
    if not extra:
        return base
    merged = base.model_dump()
    merged.update(extra)
    return MetricMetadata.model_validate(merged)


class TelemetryCollector:
    """Owns the metric set for one process."""

    def __init__(
        self,
        settings: Settings | None = None,
        alerting: AlertingEngine | None = None,
        metrics: TelemetryMetrics | None = None,
        structured_logger: StructuredTelemetryLogger | None = None,
        clock: Clock | None = None,
    ) -> None:
        """Initialize collector.

        Args:
            settings: Retention, enable flag and default tags
            alerting: Engine evaluated on every completed metric (optional)
            metrics: Metric export sink (optional, defaults to no-op)
            structured_logger: Completion logger (optional, built from settings)
            clock: Injectable wall clock
        """
        self._settings = settings or get_settings()
        self._alerting = alerting
        self._metrics = metrics or TelemetryMetrics()
        self._log = structured_logger or StructuredTelemetryLogger(
            slow_operation_ms=self._settings.slow_operation_ms,
            very_slow_operation_ms=self._settings.very_slow_operation_ms,
        )
        self._clock = clock or utc_now
        self._enabled = self._settings.telemetry_enabled
        self._lock = threading.Lock()
        self._by_id: dict[str, ExecutionMetric] = {}

    @property
    def enabled(self) -> bool:
        return self._enabled

    def set_enabled(self, enabled: bool) -> None:
        """Enable or disable collection."""
        self._enabled = enabled

    @property
    def size(self) -> int:
        with self._lock:
            return len(self._by_id)

    def begin(
        self,
        category: str,
        operation_id: str,
        tags: Mapping[str, str] | None = None,
        metadata: Mapping[str, Any] | None = None,
    ) -> str:
        """Start timing an operation.

        Returns:
            Metric id to pass to :meth:`end`, or "" when telemetry is disabled
        """
        if not self._enabled:
            return ""

        try:
            now = self._clock()
            metric = ExecutionMetric(
                id=f"metric-{uuid.uuid4()}",
                category=category,
                operation_id=operation_id,
                start_time=now,
                tags=self._tags(tags),
                metadata=_merge_metadata(MetricMetadata(), metadata),
            )
            with self._lock:
                self._by_id[metric.id] = metric
                self._evict_locked(now)
            return metric.id
        except Exception:
            logger.exception(f"Failed to begin telemetry for {category}")
            return ""

    def end(
        self,
        metric_id: str,
        success: bool = True,
        error_kind: str | None = None,
        extra_metadata: Mapping[str, Any] | None = None,
    ) -> ExecutionMetric | None:
        """Complete a metric started with :meth:`begin`.

        No-op for "", unknown, evicted or already completed ids.
        """
        if not self._enabled or not metric_id:
            return None

        try:
            now = self._clock()
            with self._lock:
                current = self._by_id.get(metric_id)
                if current is None or current.completed:
                    return None
                completed = current.model_copy(
                    update={
                        "end_time": now,
                        "duration_ms": (now - current.start_time).total_seconds() * 1000,
                        "success": success,
                        "error_kind": error_kind,
                        "metadata": _merge_metadata(current.metadata, extra_metadata),
                    }
                )
                self._by_id[metric_id] = completed
                self._evict_locked(now)
        except Exception:
            logger.exception(f"Failed to end telemetry for {metric_id}")
            return None

        self._on_completed(completed)
        return completed

    def record_complete(
        self,
        category: str,
        operation_id: str,
        duration_ms: float,
        success: bool = True,
        metadata: Mapping[str, Any] | None = None,
        tags: Mapping[str, str] | None = None,
        error_kind: str | None = None,
    ) -> ExecutionMetric | None:
        """Record already-measured work in a single call."""
        if not self._enabled:
            return None

        try:
            now = self._clock()
            metric = ExecutionMetric(
                id=f"metric-{uuid.uuid4()}",
                category=category,
                operation_id=operation_id,
                start_time=now - timedelta(milliseconds=duration_ms),
                end_time=now,
                duration_ms=duration_ms,
                success=success,
                error_kind=error_kind,
                tags=self._tags(tags),
                metadata=_merge_metadata(MetricMetadata(), metadata),
            )
            with self._lock:
                self._by_id[metric.id] = metric
                self._evict_locked(now)
        except Exception:
            logger.exception(f"Failed to record telemetry for {category}")
            return None

        self._on_completed(metric)
        return metric

    def get(self, metric_id: str) -> ExecutionMetric | None:
        with self._lock:
            return self._by_id.get(metric_id)

    def snapshot(self) -> list[ExecutionMetric]:
        """Copy of every retained metric in insertion order."""
        with self._lock:
            return list(self._by_id.values())

    def completed(
        self, category: str | None = None, since: datetime | None = None
    ) -> list[ExecutionMetric]:
        """Completed metrics, optionally filtered by category and start time."""
        return [
            m
            for m in self.snapshot()
            if m.completed
            and (category is None or m.category == category)
            and (since is None or m.start_time >= since)
        ]

    def categories(self) -> list[str]:
        return sorted({m.category for m in self.snapshot()})

    def clear(self) -> None:
        with self._lock:
            self._by_id.clear()

    def _tags(self, tags: Mapping[str, str] | None) -> dict[str, str]:
        return {
            "environment": self._settings.environment,
            "version": self._settings.app_version,
            **(tags or {}),
        }

    def _evict_locked(self, now: datetime) -> None:
        cutoff = now - timedelta(hours=self._settings.metrics_retention_hours)
        stale = [
            metric_id
            for metric_id, m in self._by_id.items()
            if (m.end_time or m.start_time) <= cutoff
        ]
        for metric_id in stale:
            del self._by_id[metric_id]

    def _on_completed(self, metric: ExecutionMetric) -> None:
        try:
            outcome = "success" if metric.success else "error"
            self._metrics.record_latency(metric.category, outcome, metric.duration_ms or 0.0)
            if not metric.success:
                self._metrics.inc_error(metric.category, metric.error_kind or "unknown")
            self._log.log_completion(metric)
        except Exception:
            logger.exception(f"Failed to export metric {metric.id}")

        if self._alerting is None:
            return
        try:
            self._alerting.evaluate(metric, self.snapshot())
        except Exception:
            logger.exception(f"Alert evaluation failed for metric {metric.id}")
