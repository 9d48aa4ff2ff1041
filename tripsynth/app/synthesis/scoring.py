"""Confidence and quality scoring for synthesized itineraries.

All weights live in the tables below; no stage applies its own boosts.
"""

from dataclasses import dataclass

from tripsynth.app.models.common import AgentRole
from tripsynth.app.models.itinerary import Itinerary
from tripsynth.app.models.roles import (
    ArchitectOutput,
    GathererOutput,
    PutterOutput,
    SpecialistOutput,
)
from tripsynth.app.synthesis.interests import matches_interests

CONFIDENCE_WEIGHTS: dict[AgentRole, float] = {
    AgentRole.architect: 0.4,
    AgentRole.gatherer: 0.3,
    AgentRole.specialist: 0.2,
    AgentRole.putter: 0.1,
}

# (signal present, signal absent) role-level confidence
GATHERER_CONFIDENCE = (0.9, 0.7)  # has source citations
SPECIALIST_CONFIDENCE = (0.85, 0.6)  # has expert insights
PUTTER_CONFIDENCE = (0.95, 0.8)  # has preferences

QUALITY_MAX_POINTS = 100.0
COMPLETENESS_POINTS = 10.0  # each: overview, highlights, daily plan, budget
PERSONALIZATION_POINTS = 30.0
ACCOMMODATION_POINTS = 7.0
TRANSPORTATION_POINTS = 7.0
DINING_POINTS = 6.0
TIPS_POINTS = 5.0
CONFIDENCE_POINTS = 5.0
POLISH_CONFIDENCE_FLOOR = 0.8


def _pick(pair: tuple[float, float], present: bool) -> float:
    return pair[0] if present else pair[1]


def compute_confidence(
    architect: ArchitectOutput,
    gatherer: GathererOutput,
    specialist: SpecialistOutput,
    putter: PutterOutput,
) -> float:
    """Weighted combination of role-level confidence, clamped to [0, 1]."""
    role_scores = {
        AgentRole.architect: architect.confidence,
        AgentRole.gatherer: _pick(GATHERER_CONFIDENCE, bool(gatherer.sources)),
        AgentRole.specialist: _pick(SPECIALIST_CONFIDENCE, bool(specialist.expert_insights)),
        AgentRole.putter: _pick(PUTTER_CONFIDENCE, putter.preferences is not None),
    }
    total = sum(CONFIDENCE_WEIGHTS[role] * score for role, score in role_scores.items())
    return max(0.0, min(1.0, total))


@dataclass(frozen=True)
class QualityBreakdown:
    """Points achieved per rubric bucket."""

    completeness: float
    personalization: float
    practicality: float
    polish: float

    @property
    def points(self) -> float:
        return self.completeness + self.personalization + self.practicality + self.polish

    @property
    def score(self) -> float:
        """Fraction of the maximum possible points."""
        return self.points / QUALITY_MAX_POINTS


def score_quality(
    itinerary: Itinerary, interests: list[str], confidence: float
) -> QualityBreakdown:
    """Grade a finalized itinerary on the four-bucket rubric.

    Args:
        itinerary: Finalized itinerary
        interests: Traveler's declared interests
        confidence: Combined confidence computed for this synthesis

    Returns:
        QualityBreakdown with per-bucket points
    """
    completeness = 0.0
    if itinerary.overview:
        completeness += COMPLETENESS_POINTS
    if itinerary.highlights:
        completeness += COMPLETENESS_POINTS
    if itinerary.daily_plan:
        completeness += COMPLETENESS_POINTS
    if itinerary.budget.total > 0:
        completeness += COMPLETENESS_POINTS

    personalization = 0.0
    if interests:
        planned = [a for day in itinerary.daily_plan for a in day.activities]
        matched = sum(1 for a in planned if matches_interests(a.tags, interests))
        personalization = min(
            PERSONALIZATION_POINTS,
            matched / max(1, len(planned)) * PERSONALIZATION_POINTS,
        )

    practicality = 0.0
    if itinerary.accommodations:
        practicality += ACCOMMODATION_POINTS
    if itinerary.transportation:
        practicality += TRANSPORTATION_POINTS
    if itinerary.dining:
        practicality += DINING_POINTS

    polish = 0.0
    if itinerary.tips:
        polish += TIPS_POINTS
    if confidence > POLISH_CONFIDENCE_FLOOR:
        polish += CONFIDENCE_POINTS

    return QualityBreakdown(
        completeness=completeness,
        personalization=personalization,
        practicality=practicality,
        polish=polish,
    )


def compute_quality(itinerary: Itinerary, interests: list[str], confidence: float) -> float:
    """Quality score as a fraction in [0, 1]."""
    return max(0.0, min(1.0, score_quality(itinerary, interests, confidence).score))
