"""Prometheus metrics endpoint."""

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

router = APIRouter()


@router.get("/metrics")
async def metrics() -> Response:
    """Prometheus metrics endpoint.

    Exposes all registered Prometheus metrics including:
    - operation_latency_ms{category, outcome}
    - operation_errors_total{category, error_kind}
    - alerts_raised_total{kind, severity}
    """
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
