"""Structured logging for telemetry and alerting."""

import logging
from typing import Any

from tripsynth.app.models.telemetry import Alert, ExecutionMetric

logger = logging.getLogger(__name__)


class StructuredTelemetryLogger:
    """Structured logger for completed operations and alerts."""

    def __init__(self, slow_operation_ms: float, very_slow_operation_ms: float) -> None:
        self._slow_ms = slow_operation_ms
        self._very_slow_ms = very_slow_operation_ms

    def log_completion(self, metric: ExecutionMetric) -> None:
        """Log a completed operation, escalating level for slow or failed ones."""
        duration = metric.duration_ms or 0.0
        log_data: dict[str, Any] = {
            "metric_id": metric.id,
            "category": metric.category,
            "operation_id": metric.operation_id,
            "success": metric.success,
            "duration_ms": round(duration, 2),
        }
        if metric.error_kind:
            log_data["error_kind"] = metric.error_kind
        if metric.metadata.agent_role:
            log_data["agent_role"] = metric.metadata.agent_role

        if duration >= self._very_slow_ms:
            log_data["metadata"] = metric.metadata.model_dump(exclude_none=True)
            log_data["tags"] = metric.tags
            logger.error(
                f"Very slow operation: {metric.category} took {duration:.0f}ms",
                extra={"structured": log_data},
            )
        elif duration >= self._slow_ms:
            logger.warning(
                f"Slow operation: {metric.category} took {duration:.0f}ms",
                extra={"structured": log_data},
            )
        elif not metric.success:
            logger.warning(
                f"Operation failed: {metric.category} ({metric.error_kind or 'unknown'})",
                extra={"structured": log_data},
            )
        else:
            logger.debug(f"Operation completed: {metric.category}", extra={"structured": log_data})

    def log_alert(self, alert: Alert) -> None:
        """Log a newly raised alert."""
        log_data: dict[str, Any] = {
            "alert_id": alert.id,
            "kind": alert.kind.value,
            "severity": alert.severity.value,
            "subject": alert.subject,
            "details": alert.details.model_dump(mode="json"),
            "recommendations": alert.recommendations,
        }
        logger.warning(
            f"Alert {alert.severity.value.upper()}: {alert.message}",
            extra={"structured": log_data},
        )
