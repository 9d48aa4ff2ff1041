"""Itinerary models - the canonical merged artifact."""

from datetime import date, datetime

from pydantic import BaseModel, Field, model_validator

from tripsynth.app.models.common import Priority
from tripsynth.app.models.roles import (
    AccommodationOption,
    AttractionCandidate,
    BudgetBreakdown,
    DiningOption,
    TransportationOption,
)


class ItineraryDuration(BaseModel):
    """Trip length reconciled with the traveler's literal dates."""

    days: int = Field(..., ge=0)
    nights: int = Field(..., ge=0)
    start_date: str | None = None
    end_date: str | None = None


class Travelers(BaseModel):
    """Traveler composition."""

    adults: int = Field(default=2, ge=0)
    children: int = Field(default=0, ge=0)

    @property
    def total(self) -> int:
        return self.adults + self.children


class PlannedActivity(BaseModel):
    """Single activity placed on a day."""

    id: str
    name: str
    description: str = ""
    location: str = "TBD"
    duration: str = ""
    cost: float = 0.0
    category: str = "general"
    rating: float | None = None
    tags: list[str] = Field(default_factory=list)


class Meal(BaseModel):
    """Meal slot with a generic venue placeholder."""

    type: str
    time: str
    name: str
    notes: str | None = None


class DailyPlan(BaseModel):
    """Plan for a single day."""

    day: int = Field(..., ge=1)
    date: date | None  # None when the trip start date is unparsable
    title: str
    activities: list[PlannedActivity] = Field(default_factory=list)
    meals: list[Meal] = Field(default_factory=list)
    notes: str = ""


class Budget(BaseModel):
    """Final budget; the total may differ from the breakdown sum."""

    total: float = Field(..., ge=0)
    currency: str
    breakdown: BudgetBreakdown = Field(default_factory=BudgetBreakdown)
    per_person: float | None = None


class Tip(BaseModel):
    """Traveler-facing tip."""

    category: str
    title: str
    content: str
    priority: Priority = Priority.medium


class GenerationMetadata(BaseModel):
    """Provenance of a generated itinerary."""

    generated_at: datetime
    version: str
    confidence: float = Field(..., ge=0, le=1)
    quality: float = Field(default=0.0, ge=0, le=1)
    processing_time_ms: float = Field(default=0.0, ge=0)


class Itinerary(BaseModel):
    """Complete itinerary output."""

    title: str
    destination: str
    duration: ItineraryDuration
    travelers: Travelers
    overview: str
    highlights: list[str]
    daily_plan: list[DailyPlan]
    accommodations: list[AccommodationOption]
    transportation: list[TransportationOption]
    activities: list[AttractionCandidate]
    dining: list[DiningOption]
    budget: Budget
    tips: list[Tip]
    notes: str
    metadata: GenerationMetadata

    @model_validator(mode="after")
    def validate_daily_plan_length(self) -> "Itinerary":
        """Ensure the day sequence never outruns the trip length."""
        if len(self.daily_plan) > self.duration.days:
            raise ValueError(
                f"daily_plan has {len(self.daily_plan)} days, trip is {self.duration.days} days"
            )
        return self
