"""Stage 1 - cross-role validation of the four role outputs."""

from tripsynth.app.models.roles import (
    ArchitectOutput,
    GathererOutput,
    PutterOutput,
    SpecialistOutput,
)


def validate_role_outputs(
    architect: ArchitectOutput,
    gatherer: GathererOutput,
    specialist: SpecialistOutput,
    putter: PutterOutput,
    *,
    min_architect_confidence: float,
) -> list[str]:
    """Validate all role outputs and collect every failure.

    Checks do not short-circuit so the caller gets a complete report in one
    round trip.

    Args:
        architect: Itinerary skeleton
        gatherer: Destination facts
        specialist: Local expertise
        putter: Traveler request echo
        min_architect_confidence: Floor for the architect's self-reported confidence

    Returns:
        List of human-readable errors (empty when valid)
    """
    errors: list[str] = []

    if not architect.title or not architect.destination:
        errors.append("Architect output missing required fields: title or destination")
    if architect.confidence < min_architect_confidence:
        errors.append(
            f"Architect confidence too low: {architect.confidence} "
            f"(minimum {min_architect_confidence})"
        )

    if not gatherer.destination or not gatherer.current_attractions:
        errors.append("Gatherer output missing destination or attractions data")

    if not specialist.destination or not specialist.expert_insights:
        errors.append("Specialist output missing destination or insights")

    if putter.preferences is None or putter.constraints is None:
        errors.append("Putter output missing preferences or constraints")

    destinations = [
        architect.destination,
        gatherer.destination,
        specialist.destination,
        putter.destination,
    ]
    if any(d != destinations[0] for d in destinations):
        errors.append(
            "Agent outputs have inconsistent destinations: "
            + ", ".join(repr(d) for d in destinations)
        )

    return errors
