"""Built-in sample role outputs used by the synthesis self-check."""

from tripsynth.app.models.roles import (
    ArchitectBudget,
    ArchitectOutput,
    AttractionCandidate,
    BudgetBreakdown,
    DateConstraints,
    ExpertInsight,
    GathererOutput,
    LocalExperience,
    PutterOutput,
    SourceCitation,
    SpecialistOutput,
    TravelConstraints,
    TravelerCounts,
    TravelPreferences,
    TripDuration,
)


def sample_role_outputs(
    destination: str = "Test City",
) -> tuple[ArchitectOutput, GathererOutput, SpecialistOutput, PutterOutput]:
    """Minimal valid quadruple for ``destination``."""
    architect = ArchitectOutput(
        title="Test Itinerary",
        destination=destination,
        duration=TripDuration(days=3, nights=2),
        travelers=TravelerCounts(adults=2, children=0),
        overview="Test overview",
        highlights=["Test highlight"],
        budget=ArchitectBudget(
            total=1000,
            currency="USD",
            breakdown=BudgetBreakdown(
                accommodations=400,
                transportation=200,
                activities=200,
                dining=150,
                miscellaneous=50,
            ),
        ),
        themes=["test"],
        confidence=0.9,
    )
    gatherer = GathererOutput(
        destination=destination,
        current_attractions=[AttractionCandidate(name="Test Museum", category="culture")],
        sources=[SourceCitation(url="https://example.com/guide", title="Guide")],
    )
    specialist = SpecialistOutput(
        destination=destination,
        expert_insights=[
            ExpertInsight(category="tips", title="Go early", content="Beat the crowds.")
        ],
        local_experiences=[
            LocalExperience(name="Old Town Walk", best_for=["culture", "walking"])
        ],
    )
    putter = PutterOutput(
        destination=destination,
        preferences=TravelPreferences(interests=["culture"]),
        constraints=TravelConstraints(dates=DateConstraints(start="2025-06-10", end="2025-06-12")),
    )
    return architect, gatherer, specialist, putter
