"""Synthesis result models."""

from pydantic import BaseModel, Field

from tripsynth.app.models.itinerary import Itinerary
from tripsynth.app.models.roles import RoleOutput


class SynthesisMetadata(BaseModel):
    """Which roles contributed and how."""

    roles_used: list[str] = Field(default_factory=list)
    sources_count: int = 0
    synthesis_version: str
    quality_score: float = Field(default=0.0, ge=0, le=1)


class SynthesisResult(BaseModel):
    """Outcome of one synthesis call.

    ``itinerary`` is present iff ``success`` is true. Renderers must surface
    ``errors`` instead of rendering when ``success`` is false.
    """

    success: bool
    itinerary: Itinerary | None = None
    confidence: float = Field(..., ge=0, le=1)
    quality: float = Field(..., ge=0, le=1)
    processing_time_ms: float = Field(..., ge=0)
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    metadata: SynthesisMetadata


class SynthesisRequest(BaseModel):
    """Request body for POST /synthesize - one output per role, any order."""

    outputs: list[RoleOutput] = Field(..., min_length=1, max_length=4)
    session_id: str | None = None
