"""FastAPI dependencies."""

from fastapi import Request

from tripsynth.app.services import TelemetryServices


def get_services(request: Request) -> TelemetryServices:
    """Service container built by the application lifespan."""
    services: TelemetryServices = request.app.state.services
    return services
