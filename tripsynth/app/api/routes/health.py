"""Health check endpoints.

- /health is a liveness probe
- /healthz reports telemetry health and a sample synthesis run
"""

from typing import Annotated, Any

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from tripsynth.app.api.deps import get_services
from tripsynth.app.services import TelemetryServices

router = APIRouter()


@router.get("/health")
async def health() -> dict[str, str]:
    """Simple health check for Docker/k8s.

    Returns:
        200 OK always (application is running)
    """
    return {"status": "ok"}


@router.get("/healthz", response_model=None)
async def healthz(
    services: Annotated[TelemetryServices, Depends(get_services)],
) -> dict[str, Any] | JSONResponse:
    """Component health check.

    Returns:
        200 with component status when telemetry is healthy or degraded
        503 when telemetry is unhealthy or the sample synthesis fails
    """
    telemetry = services.stats.health()
    synthesis = services.coordinator.health_check()

    core_ok = telemetry.status != "unhealthy" and synthesis["status"] == "healthy"
    response_body = {
        "status": telemetry.status if core_ok else "unhealthy",
        "components": {
            "telemetry": telemetry.model_dump(mode="json"),
            "synthesis": synthesis,
        },
    }

    if not core_ok:
        return JSONResponse(content=response_body, status_code=503)
    return response_body
