"""Synthesis coordinator - combines the four role outputs into one itinerary.

Pipeline: validate -> merge -> enrich -> optimize -> finalize, then score.
Only validation fails intentionally; any unexpected fault in later stages is
reported as a single "Synthesis failed" error with no itinerary.
"""

import logging
import time
import uuid
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from tripsynth.app.config import Settings, get_settings
from tripsynth.app.models.common import AgentRole, OperationCategory
from tripsynth.app.models.roles import (
    ArchitectOutput,
    GathererOutput,
    PutterOutput,
    RoleOutput,
    SpecialistOutput,
)
from tripsynth.app.models.synthesis import SynthesisMetadata, SynthesisResult
from tripsynth.app.synthesis.samples import sample_role_outputs
from tripsynth.app.synthesis.scoring import compute_confidence, compute_quality
from tripsynth.app.synthesis.stages import (
    enrich_with_specialist_data,
    finalize_itinerary,
    merge_core_data,
    optimize_for_preferences,
)
from tripsynth.app.synthesis.validation import validate_role_outputs
from tripsynth.app.utils.clock import Clock, utc_now

if TYPE_CHECKING:
    from tripsynth.app.telemetry.collector import TelemetryCollector

logger = logging.getLogger(__name__)

ROLE_ORDER = [AgentRole.architect, AgentRole.gatherer, AgentRole.specialist, AgentRole.putter]


class SynthesisCoordinator:
    """Stateless between calls apart from configuration and injected services."""

    def __init__(
        self,
        settings: Settings | None = None,
        collector: "TelemetryCollector | None" = None,
        clock: Clock | None = None,
    ) -> None:
        """Initialize coordinator.

        Args:
            settings: Pipeline configuration (defaults to cached settings)
            collector: Telemetry collector for recording each run (optional)
            clock: Injectable wall clock for generation timestamps
        """
        self._settings = settings or get_settings()
        self._collector = collector
        self._clock = clock or utc_now

    def synthesize(
        self,
        architect: ArchitectOutput,
        gatherer: GathererOutput,
        specialist: SpecialistOutput,
        putter: PutterOutput,
        *,
        session_id: str | None = None,
    ) -> SynthesisResult:
        """Combine role outputs into a scored itinerary.

        Args:
            architect: Itinerary skeleton and budget
            gatherer: Destination facts and sources
            specialist: Local expertise
            putter: Traveler request echo
            session_id: Caller session recorded on the telemetry metric

        Returns:
            SynthesisResult; ``itinerary`` is None whenever ``success`` is False
        """
        metric_id = self._begin_metric(architect.destination, session_id)
        result = self._run_pipeline(architect, gatherer, specialist, putter)
        self._end_metric(metric_id, result)
        return result

    def synthesize_outputs(
        self, outputs: Iterable[RoleOutput], *, session_id: str | None = None
    ) -> SynthesisResult:
        """Synthesize from an unordered collection of tagged role outputs."""
        by_role: dict[AgentRole, Any] = {}
        errors: list[str] = []

        for output in outputs:
            match output:
                case ArchitectOutput():
                    role = AgentRole.architect
                case GathererOutput():
                    role = AgentRole.gatherer
                case SpecialistOutput():
                    role = AgentRole.specialist
                case PutterOutput():
                    role = AgentRole.putter
                case _:
                    errors.append(f"Unsupported role output: {type(output).__name__}")
                    continue
            if role in by_role:
                errors.append(f"Duplicate {role.value} output")
                continue
            by_role[role] = output

        missing = [role.value for role in ROLE_ORDER if role not in by_role]
        if missing:
            errors.append(f"Missing role outputs: {', '.join(missing)}")

        if errors:
            logger.warning(f"[synthesis] rejected role outputs: {errors}")
            architect = by_role.get(AgentRole.architect)
            metric_id = self._begin_metric(
                architect.destination if architect else "unknown", session_id
            )
            result = self._error_result(errors, time.monotonic())
            self._end_metric(metric_id, result)
            return result

        return self.synthesize(
            by_role[AgentRole.architect],
            by_role[AgentRole.gatherer],
            by_role[AgentRole.specialist],
            by_role[AgentRole.putter],
            session_id=session_id,
        )

    def health_check(self) -> dict[str, Any]:
        """Run a synthesis over built-in sample outputs."""
        start = time.monotonic()
        try:
            result = self._run_pipeline(*sample_role_outputs())
        except Exception as e:
            logger.exception("[synthesis] health check fault")
            return {"status": "unhealthy", "error": f"{type(e).__name__}: {e}"}

        latency_ms = round((time.monotonic() - start) * 1000, 2)
        if not result.success:
            return {
                "status": "unhealthy",
                "latency_ms": latency_ms,
                "error": "; ".join(result.errors),
            }
        return {"status": "healthy", "latency_ms": latency_ms}

    def _run_pipeline(
        self,
        architect: ArchitectOutput,
        gatherer: GathererOutput,
        specialist: SpecialistOutput,
        putter: PutterOutput,
    ) -> SynthesisResult:
        start = time.monotonic()
        settings = self._settings

        errors = validate_role_outputs(
            architect,
            gatherer,
            specialist,
            putter,
            min_architect_confidence=settings.min_architect_confidence,
        )
        if errors:
            logger.warning(
                f"[synthesis] validation failed for {architect.destination!r}: {len(errors)} errors"
            )
            return self._error_result(errors, start)

        try:
            draft = merge_core_data(architect, putter)
            draft = enrich_with_specialist_data(
                draft,
                gatherer,
                specialist,
                putter,
                max_daily_plans=settings.max_daily_plans,
                max_activities_per_day=settings.max_activities_per_day,
                max_accommodations=settings.max_accommodations,
                max_dining=settings.max_dining_recommendations,
            )
            draft = optimize_for_preferences(draft, putter)

            confidence = compute_confidence(architect, gatherer, specialist, putter)
            itinerary = finalize_itinerary(
                draft,
                putter,
                default_currency=settings.default_currency,
                version=settings.synthesis_version,
                confidence=confidence,
                generated_at=self._clock(),
            )
            interests = putter.preferences.interests if putter.preferences else []
            quality = compute_quality(itinerary, interests, confidence)

            elapsed_ms = (time.monotonic() - start) * 1000
            itinerary = itinerary.model_copy(
                update={
                    "metadata": itinerary.metadata.model_copy(
                        update={"quality": quality, "processing_time_ms": elapsed_ms}
                    )
                }
            )
        except Exception as e:
            logger.exception(f"[synthesis] pipeline fault for {architect.destination!r}")
            return self._error_result([f"Synthesis failed: {e}"], start)

        logger.info(
            f"[synthesis] {architect.destination}: {len(itinerary.daily_plan)} days, "
            f"confidence={confidence:.2f}, quality={quality:.2f}"
        )

        return SynthesisResult(
            success=True,
            itinerary=itinerary,
            confidence=confidence,
            quality=quality,
            processing_time_ms=elapsed_ms,
            errors=[],
            warnings=self._warnings(gatherer, specialist, putter),
            metadata=SynthesisMetadata(
                roles_used=[role.value for role in ROLE_ORDER],
                sources_count=len(gatherer.sources),
                synthesis_version=settings.synthesis_version,
                quality_score=quality,
            ),
        )

    def _warnings(
        self,
        gatherer: GathererOutput,
        specialist: SpecialistOutput,
        putter: PutterOutput,
    ) -> list[str]:
        """Non-fatal gaps that lower confidence or quality."""
        warnings: list[str] = []
        if not gatherer.sources:
            warnings.append("Gatherer returned no source citations")
        if not specialist.local_experiences:
            warnings.append("Specialist returned no local experiences; daily plans are empty")
        if not gatherer.accommodations:
            warnings.append("No accommodation options available")
        if putter.preferences is not None and not putter.preferences.interests:
            warnings.append("No traveler interests declared; activities are not personalized")
        return warnings

    def _error_result(self, errors: list[str], start: float) -> SynthesisResult:
        return SynthesisResult(
            success=False,
            itinerary=None,
            confidence=0.0,
            quality=0.0,
            processing_time_ms=(time.monotonic() - start) * 1000,
            errors=errors,
            warnings=[],
            metadata=SynthesisMetadata(
                roles_used=[],
                sources_count=0,
                synthesis_version=self._settings.synthesis_version,
                quality_score=0.0,
            ),
        )

    def _begin_metric(self, destination: str, session_id: str | None) -> str:
        if self._collector is None:
            return ""
        return self._collector.begin(
            OperationCategory.synthesis.value,
            f"synthesis-{uuid.uuid4()}",
            tags={"destination": destination},
            metadata={"session_id": session_id},
        )

    def _end_metric(self, metric_id: str, result: SynthesisResult) -> None:
        if self._collector is None:
            return
        if result.success:
            self._collector.end(
                metric_id,
                success=True,
                extra_metadata={
                    "confidence": result.confidence,
                    "quality": result.quality,
                    "result_count": len(result.itinerary.daily_plan) if result.itinerary else 0,
                },
            )
        else:
            error_kind = (
                "internal_fault"
                if any(e.startswith("Synthesis failed") for e in result.errors)
                else "validation"
            )
            self._collector.end(metric_id, success=False, error_kind=error_kind)
