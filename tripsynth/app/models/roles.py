"""Role output contracts - structured results of the four AI generation roles.

Each role output carries a ``role`` discriminant so a payload can be parsed
into the right variant of :data:`RoleOutput` without probing optional fields.
"""

from typing import Annotated, Literal

from pydantic import BaseModel, Field

from tripsynth.app.models.common import AccessDifficulty, BudgetFlexibility, Priority


# Architect


class TripDuration(BaseModel):
    """Trip length as planned by the architect."""

    days: int = Field(..., ge=0)
    nights: int = Field(..., ge=0)


class TravelerCounts(BaseModel):
    """Number of travelers."""

    adults: int = Field(default=2, ge=0)
    children: int = Field(default=0, ge=0)


class BudgetBreakdown(BaseModel):
    """Budget split across the five spending categories."""

    accommodations: float = Field(default=0.0, ge=0)
    transportation: float = Field(default=0.0, ge=0)
    activities: float = Field(default=0.0, ge=0)
    dining: float = Field(default=0.0, ge=0)
    miscellaneous: float = Field(default=0.0, ge=0)

    def total(self) -> float:
        """Sum of all categories."""
        return (
            self.accommodations
            + self.transportation
            + self.activities
            + self.dining
            + self.miscellaneous
        )


class ArchitectBudget(BaseModel):
    """Budget proposed by the architect."""

    total: float = Field(..., ge=0)
    currency: str = "USD"
    breakdown: BudgetBreakdown = Field(default_factory=BudgetBreakdown)


class ArchitectOutput(BaseModel):
    """Itinerary skeleton produced by the architect role."""

    role: Literal["architect"] = "architect"
    title: str = ""
    destination: str = ""
    duration: TripDuration
    travelers: TravelerCounts = Field(default_factory=TravelerCounts)
    overview: str = ""
    highlights: list[str] = Field(default_factory=list)
    budget: ArchitectBudget
    themes: list[str] = Field(default_factory=list)
    confidence: float = Field(..., ge=0, le=1)


# Gatherer


class AttractionCandidate(BaseModel):
    name: str
    description: str = ""
    category: str = "general"
    rating: float | None = None
    estimated_cost: float | None = None
    best_time: str | None = None
    duration: str | None = None


class AccommodationOption(BaseModel):
    name: str
    type: str = "hotel"
    location: str = ""
    rating: float | None = None
    price_range: str = ""
    amenities: list[str] = Field(default_factory=list)
    description: str | None = None


class DiningOption(BaseModel):
    name: str
    cuisine: str = ""
    price_range: str = ""
    rating: float | None = None
    location: str = ""
    specialties: list[str] = Field(default_factory=list)


class TransportationOption(BaseModel):
    type: str
    from_location: str = ""
    to_location: str = ""
    providers: list[str] = Field(default_factory=list)
    estimated_cost: float | None = None
    duration: str = ""


class PracticalInfo(BaseModel):
    """Practical facts about the destination."""

    best_time_to_visit: str = ""
    currency: str = ""
    language: str = ""
    time_zone: str = ""
    visa_requirements: str | None = None
    health_safety: list[str] = Field(default_factory=list)


class SourceCitation(BaseModel):
    """Web source the gatherer relied on."""

    url: str
    title: str = ""
    credibility: float = Field(default=0.5, ge=0, le=1)
    last_updated: str | None = None


class GathererOutput(BaseModel):
    """Current destination facts collected by the gatherer role."""

    role: Literal["gatherer"] = "gatherer"
    destination: str = ""
    current_attractions: list[AttractionCandidate] = Field(default_factory=list)
    accommodations: list[AccommodationOption] = Field(default_factory=list)
    dining: list[DiningOption] = Field(default_factory=list)
    transportation: list[TransportationOption] = Field(default_factory=list)
    practical_info: PracticalInfo = Field(default_factory=PracticalInfo)
    sources: list[SourceCitation] = Field(default_factory=list)


# Specialist


class ExpertInsight(BaseModel):
    category: str
    title: str
    content: str
    priority: Priority = Priority.medium
    source: str | None = None


class LocalExperience(BaseModel):
    name: str
    description: str = ""
    authentic_rating: float = Field(default=5, ge=1, le=10)
    cost: float = Field(default=0.0, ge=0)
    duration: str = ""
    best_for: list[str] = Field(default_factory=list)
    insider_tips: list[str] = Field(default_factory=list)


class SeasonalConsiderations(BaseModel):
    current_season: str = ""
    weather: str = ""
    crowds: str = ""
    pricing: str = ""
    recommendations: list[str] = Field(default_factory=list)


class CulturalNote(BaseModel):
    aspect: str
    importance: Priority = Priority.medium
    description: str = ""
    do_and_dont: list[str] = Field(default_factory=list)


class HiddenGem(BaseModel):
    name: str
    description: str = ""
    why_special: str = ""
    access_difficulty: AccessDifficulty = AccessDifficulty.easy
    cost: float = Field(default=0.0, ge=0)


class SpecialistOutput(BaseModel):
    """Local expertise produced by the specialist role."""

    role: Literal["specialist"] = "specialist"
    destination: str = ""
    expert_insights: list[ExpertInsight] = Field(default_factory=list)
    local_experiences: list[LocalExperience] = Field(default_factory=list)
    seasonal_considerations: SeasonalConsiderations = Field(
        default_factory=SeasonalConsiderations
    )
    cultural_notes: list[CulturalNote] = Field(default_factory=list)
    hidden_gems: list[HiddenGem] = Field(default_factory=list)


# Putter


class BudgetPreference(BaseModel):
    total: float = Field(default=0.0, ge=0)
    flexibility: BudgetFlexibility = BudgetFlexibility.moderate
    priorities: list[str] = Field(default_factory=list)


class GroupComposition(BaseModel):
    adults: int = Field(default=2, ge=0)
    children: int = Field(default=0, ge=0)
    ages: list[int] = Field(default_factory=list)


class TravelPreferences(BaseModel):
    """Echo of the traveler's original request."""

    budget: BudgetPreference = Field(default_factory=BudgetPreference)
    travel_style: list[str] = Field(default_factory=list)
    interests: list[str] = Field(default_factory=list)
    dietary_restrictions: list[str] = Field(default_factory=list)
    accessibility_needs: list[str] = Field(default_factory=list)
    group_composition: GroupComposition = Field(default_factory=GroupComposition)


class DateConstraints(BaseModel):
    start: str
    end: str
    flexibility: int = Field(default=0, ge=0, description="Flexibility window in days")


class TravelConstraints(BaseModel):
    dates: DateConstraints
    time_constraints: list[str] = Field(default_factory=list)
    physical_limitations: list[str] = Field(default_factory=list)


class Personalization(BaseModel):
    must_include: list[str] = Field(default_factory=list)
    avoid: list[str] = Field(default_factory=list)
    special_requests: list[str] = Field(default_factory=list)


class PutterOutput(BaseModel):
    """Normalized traveler request produced by the putter (formatter) role.

    ``preferences`` and ``constraints`` are optional here so that their absence
    surfaces as a synthesis validation error instead of a parse error.
    """

    role: Literal["putter"] = "putter"
    destination: str = ""
    preferences: TravelPreferences | None = None
    constraints: TravelConstraints | None = None
    personalization: Personalization = Field(default_factory=Personalization)


RoleOutput = Annotated[
    ArchitectOutput | GathererOutput | SpecialistOutput | PutterOutput,
    Field(discriminator="role"),
]
