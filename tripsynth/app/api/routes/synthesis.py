"""Synthesis endpoint - POST /synthesize."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, status

from tripsynth.app.api.deps import get_services
from tripsynth.app.models.synthesis import SynthesisRequest, SynthesisResult
from tripsynth.app.services import TelemetryServices

router = APIRouter(tags=["synthesis"])
logger = logging.getLogger(__name__)


@router.post("/synthesize", response_model=SynthesisResult, status_code=status.HTTP_200_OK)
async def synthesize(
    request: SynthesisRequest,
    services: Annotated[TelemetryServices, Depends(get_services)],
) -> SynthesisResult:
    """Combine four role outputs into a scored itinerary.

    Validation failures are reported in the result body (``success=false``),
    not as HTTP errors; only malformed request bodies are rejected with 422.

    Args:
        request: Tagged role outputs and optional session id
        services: Service container

    Returns:
        SynthesisResult
    """
    logger.info(f"[POST /synthesize] outputs={len(request.outputs)}, session={request.session_id}")
    return services.coordinator.synthesize_outputs(request.outputs, session_id=request.session_id)
