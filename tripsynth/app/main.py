"""FastAPI application."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from tripsynth.app.api.routes.health import router as health_router
from tripsynth.app.api.routes.metrics import router as metrics_router
from tripsynth.app.api.routes.synthesis import router as synthesis_router
from tripsynth.app.api.routes.telemetry import router as telemetry_router
from tripsynth.app.config import get_settings
from tripsynth.app.services import TelemetryServices, build_services
from tripsynth.app.utils.metrics import PrometheusTelemetryMetrics


def create_app(services: TelemetryServices | None = None) -> FastAPI:
    """Build the application.

    Args:
        services: Pre-built container (tests); built at startup when omitted
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        app.state.services = services or build_services(metrics=PrometheusTelemetryMetrics())
        try:
            yield
        finally:
            app.state.services.close()

    settings = get_settings()
    app = FastAPI(title="Trip Synthesis API", version=settings.app_version, lifespan=lifespan)

    app.include_router(health_router, tags=["health"])
    app.include_router(metrics_router, tags=["metrics"])
    app.include_router(synthesis_router)
    app.include_router(telemetry_router)

    @app.get("/")
    async def root() -> dict[str, str]:
        """Root endpoint."""
        return {"message": "Trip Synthesis API", "version": settings.app_version}

    return app


app = create_app()
