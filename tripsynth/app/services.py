"""Service container - wires the telemetry and synthesis components together.

One container per application (or per test). Nothing here is a module-level
singleton; the FastAPI app builds a container in its lifespan and routes reach
it through :func:`tripsynth.app.api.deps.get_services`.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from tripsynth.app.config import Settings, get_settings
from tripsynth.app.models.telemetry import (
    AgentReport,
    Alert,
    ExecutionMetric,
    Stats,
    TelemetrySnapshot,
)
from tripsynth.app.synthesis.coordinator import SynthesisCoordinator
from tripsynth.app.telemetry.alerting import AlertingEngine
from tripsynth.app.telemetry.collector import TelemetryCollector
from tripsynth.app.telemetry.stats import StatisticsEngine
from tripsynth.app.utils.clock import Clock
from tripsynth.app.utils.logging import StructuredTelemetryLogger
from tripsynth.app.utils.metrics import TelemetryMetrics

logger = logging.getLogger(__name__)


@dataclass
class TelemetryServices:
    """Telemetry, alerting and synthesis components sharing one configuration."""

    settings: Settings
    collector: TelemetryCollector
    alerting: AlertingEngine
    stats: StatisticsEngine
    coordinator: SynthesisCoordinator

    def begin_operation(
        self,
        category: str,
        operation_id: str,
        tags: Mapping[str, str] | None = None,
        metadata: Mapping[str, Any] | None = None,
    ) -> str:
        return self.collector.begin(category, operation_id, tags=tags, metadata=metadata)

    def end_operation(
        self,
        metric_id: str,
        success: bool = True,
        error_kind: str | None = None,
        extra_metadata: Mapping[str, Any] | None = None,
    ) -> ExecutionMetric | None:
        return self.collector.end(
            metric_id, success=success, error_kind=error_kind, extra_metadata=extra_metadata
        )

    def record_operation(
        self,
        category: str,
        operation_id: str,
        duration_ms: float,
        success: bool = True,
        metadata: Mapping[str, Any] | None = None,
        tags: Mapping[str, str] | None = None,
        error_kind: str | None = None,
    ) -> ExecutionMetric | None:
        return self.collector.record_complete(
            category,
            operation_id,
            duration_ms,
            success=success,
            metadata=metadata,
            tags=tags,
            error_kind=error_kind,
        )

    def get_stats(self, category: str, window_minutes: float = 60) -> Stats | None:
        return self.stats.stats(category, window_minutes)

    def get_agent_report(self, window_minutes: float | None = None) -> AgentReport:
        return self.stats.agent_report(window_minutes)

    def get_active_alerts(self) -> list[Alert]:
        return self.alerting.active_alerts()

    def resolve_alert(self, alert_id: str) -> bool:
        return self.alerting.resolve(alert_id)

    def export_snapshot(self) -> TelemetrySnapshot:
        return self.stats.snapshot()

    def close(self) -> None:
        """Stop collecting and drop all retained metrics and alerts."""
        logger.info(f"Closing telemetry services ({self.collector.size} metrics retained)")
        self.collector.set_enabled(False)
        self.collector.clear()
        self.alerting.clear()


def build_services(
    settings: Settings | None = None,
    clock: Clock | None = None,
    metrics: TelemetryMetrics | None = None,
) -> TelemetryServices:
    """Build a fully wired container.

    Args:
        settings: Configuration (defaults to cached settings)
        clock: Injectable wall clock shared by every component
        metrics: Metric export sink (defaults to no-op)

    Returns:
        TelemetryServices
    """
    settings = settings or get_settings()
    structured_logger = StructuredTelemetryLogger(
        slow_operation_ms=settings.slow_operation_ms,
        very_slow_operation_ms=settings.very_slow_operation_ms,
    )
    alerting = AlertingEngine(
        settings=settings, metrics=metrics, structured_logger=structured_logger, clock=clock
    )
    collector = TelemetryCollector(
        settings=settings,
        alerting=alerting,
        metrics=metrics,
        structured_logger=structured_logger,
        clock=clock,
    )
    return TelemetryServices(
        settings=settings,
        collector=collector,
        alerting=alerting,
        stats=StatisticsEngine(collector, alerting=alerting, settings=settings, clock=clock),
        coordinator=SynthesisCoordinator(settings=settings, collector=collector, clock=clock),
    )
