"""Telemetry endpoints - stats, summaries, agent reports, alerts and snapshots."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status

from tripsynth.app.api.deps import get_services
from tripsynth.app.models.telemetry import (
    AgentReport,
    Alert,
    PerformanceSummary,
    Stats,
    TelemetrySnapshot,
)
from tripsynth.app.services import TelemetryServices

router = APIRouter(prefix="/telemetry", tags=["telemetry"])
logger = logging.getLogger(__name__)

WindowMinutes = Annotated[float, Query(gt=0, le=24 * 60)]


@router.get("/stats/{category}", response_model=Stats)
async def get_category_stats(
    category: str,
    services: Annotated[TelemetryServices, Depends(get_services)],
    window_minutes: WindowMinutes = 60,
) -> Stats:
    """Statistics for one operation category.

    Raises:
        HTTPException: 404 if the window holds no completed metrics
    """
    stats = services.get_stats(category, window_minutes)
    if stats is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No metrics for {category} in the last {window_minutes:g} minutes",
        )
    return stats


@router.get("/summary", response_model=PerformanceSummary)
async def get_summary(
    services: Annotated[TelemetryServices, Depends(get_services)],
    window_minutes: WindowMinutes = 60,
) -> PerformanceSummary:
    """Roll-up across every category."""
    return services.stats.summary(window_minutes)


@router.get("/agents", response_model=AgentReport)
async def get_agents(
    services: Annotated[TelemetryServices, Depends(get_services)],
    window_minutes: Annotated[float | None, Query(gt=0, le=24 * 60)] = None,
) -> AgentReport:
    """Per-role performance, quality and cost (defaults to the last 24 hours)."""
    return services.get_agent_report(window_minutes)


@router.get("/alerts", response_model=list[Alert])
async def get_alerts(
    services: Annotated[TelemetryServices, Depends(get_services)],
) -> list[Alert]:
    """Active (unresolved) alerts."""
    return services.get_active_alerts()


@router.post("/alerts/{alert_id}/resolve", response_model=Alert)
async def resolve_alert(
    alert_id: str,
    services: Annotated[TelemetryServices, Depends(get_services)],
) -> Alert:
    """Resolve an alert.

    Raises:
        HTTPException: 404 if no unresolved alert has this id
    """
    if not services.resolve_alert(alert_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Active alert {alert_id} not found",
        )

    alert = services.alerting.get(alert_id)
    if alert is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Alert {alert_id} not found",
        )

    logger.info(f"[POST /telemetry/alerts/resolve] alert_id={alert_id}")
    return alert


@router.get("/snapshot", response_model=TelemetrySnapshot)
async def get_snapshot(
    services: Annotated[TelemetryServices, Depends(get_services)],
) -> TelemetrySnapshot:
    """Every retained metric and alert plus hourly stats."""
    return services.export_snapshot()
