"""Merge, enrich, optimize and finalize stages of the synthesis pipeline.

Each stage takes the working draft and returns it. Stages after validation
substitute defaults for missing data instead of raising: a partial, clearly
scored itinerary is preferred over none.
"""

import re
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta

from tripsynth.app.models.common import BudgetFlexibility
from tripsynth.app.models.itinerary import (
    Budget,
    DailyPlan,
    GenerationMetadata,
    Itinerary,
    ItineraryDuration,
    Meal,
    PlannedActivity,
    Tip,
    Travelers,
)
from tripsynth.app.models.roles import (
    AccommodationOption,
    ArchitectOutput,
    AttractionCandidate,
    BudgetBreakdown,
    DiningOption,
    GathererOutput,
    LocalExperience,
    PutterOutput,
    SeasonalConsiderations,
    SpecialistOutput,
    TransportationOption,
    TravelPreferences,
)
from tripsynth.app.synthesis.interests import matches_interests, overlaps_interests

BUDGET_FLEXIBILITY_MULTIPLIERS: dict[BudgetFlexibility, float] = {
    BudgetFlexibility.strict: 1.0,
    BudgetFlexibility.moderate: 1.05,
    BudgetFlexibility.flexible: 1.1,
}

TIP_INSIGHT_CATEGORIES = frozenset({"tips", "advice"})

DEFAULT_TITLE = "Custom Travel Itinerary"
DEFAULT_DESTINATION = "Unknown Destination"
DEFAULT_OVERVIEW = "A wonderful travel experience awaits!"
DEFAULT_DAYS = 7


@dataclass
class ItineraryDraft:
    """Partially built itinerary passed between stages."""

    title: str | None = None
    destination: str | None = None
    duration: ItineraryDuration | None = None
    travelers: Travelers | None = None
    overview: str | None = None
    highlights: list[str] | None = None
    daily_plan: list[DailyPlan] | None = None
    accommodations: list[AccommodationOption] | None = None
    transportation: list[TransportationOption] | None = None
    activities: list[AttractionCandidate] | None = None
    dining: list[DiningOption] | None = None
    budget: Budget | None = None
    tips: list[Tip] = field(default_factory=list)
    notes: str | None = None


def _preferences(putter: PutterOutput) -> TravelPreferences:
    return putter.preferences or TravelPreferences()


def parse_trip_date(value: str | None) -> date | None:
    """Parse an ISO date (or datetime) string, returning None when unparsable."""
    if not value:
        return None
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        return None


def merge_core_data(architect: ArchitectOutput, putter: PutterOutput) -> ItineraryDraft:
    """Stage 2: copy fields owned by a single authoritative role.

    The architect owns the narrative, duration counts, travelers and budget;
    the putter's literal dates are authoritative for start/end.
    """
    dates = putter.constraints.dates if putter.constraints else None
    travelers = Travelers(
        adults=architect.travelers.adults,
        children=architect.travelers.children,
    )
    total = architect.budget.total

    return ItineraryDraft(
        title=architect.title,
        destination=architect.destination,
        duration=ItineraryDuration(
            days=architect.duration.days,
            nights=architect.duration.nights,
            start_date=dates.start if dates else None,
            end_date=dates.end if dates else None,
        ),
        travelers=travelers,
        overview=architect.overview,
        highlights=list(architect.highlights),
        budget=Budget(
            total=total,
            currency=architect.budget.currency,
            breakdown=architect.budget.breakdown.model_copy(),
            per_person=round(total / max(1, travelers.total), 2),
        ),
    )


def select_activities_for_day(
    pool: list[LocalExperience],
    interests: list[str],
    max_activities: int,
) -> list[LocalExperience]:
    """Pick interest-matching experiences first, then backfill with the rest."""
    matching = [exp for exp in pool if overlaps_interests(exp.best_for, interests)]
    selected = matching[:max_activities]
    if len(selected) < max_activities:
        general = [exp for exp in pool if exp not in matching]
        selected.extend(general[: max_activities - len(selected)])
    return selected


def _activity_id(day: int, name: str) -> str:
    slug = re.sub(r"\s+", "-", name.strip()).lower()
    return f"activity-{day}-{slug}"


def _day_title(day: int, activities: list[LocalExperience], destination: str) -> str:
    if not activities:
        return f"Day {day}: Exploring {destination}"
    if len(activities) == 1:
        return f"Day {day}: {activities[0].name}"
    return f"Day {day}: {activities[0].name} & More"


def build_meals(dietary_restrictions: list[str]) -> list[Meal]:
    """Breakfast/lunch/dinner placeholders annotated with dietary needs."""
    note = (
        f"Consider dietary restrictions: {', '.join(dietary_restrictions)}"
        if dietary_restrictions
        else None
    )
    return [
        Meal(type="breakfast", time="08:00", name="Hotel Breakfast", notes=note),
        Meal(type="lunch", time="13:00", name="Local Restaurant", notes=note),
        Meal(type="dinner", time="19:00", name="Recommended Dining", notes=note),
    ]


def _day_notes(day: int, seasonal: SeasonalConsiderations) -> str:
    notes: list[str] = []
    if day == 1:
        notes.append("Arrival day - Take it easy and adjust to the time zone")
    if seasonal.weather:
        notes.append(f"Weather: {seasonal.weather}")
    if seasonal.crowds:
        notes.append(f"Crowds: {seasonal.crowds}")
    return ". ".join(notes)


def build_daily_plans(
    draft: ItineraryDraft,
    specialist: SpecialistOutput,
    putter: PutterOutput,
    *,
    max_daily_plans: int,
    max_activities_per_day: int,
) -> list[DailyPlan]:
    """Lay out one DailyPlan per trip day, capped at ``max_daily_plans``."""
    prefs = _preferences(putter)
    days = draft.duration.days if draft.duration else DEFAULT_DAYS
    start = parse_trip_date(draft.duration.start_date if draft.duration else None)
    destination = draft.destination or DEFAULT_DESTINATION
    pool = list(specialist.local_experiences)

    plans: list[DailyPlan] = []
    for day in range(1, min(days, max_daily_plans) + 1):
        selected = select_activities_for_day(pool, prefs.interests, max_activities_per_day)
        plans.append(
            DailyPlan(
                day=day,
                date=start + timedelta(days=day - 1) if start else None,
                title=_day_title(day, selected, destination),
                activities=[
                    PlannedActivity(
                        id=_activity_id(day, exp.name),
                        name=exp.name,
                        description=exp.description,
                        duration=exp.duration,
                        cost=exp.cost,
                        category=exp.best_for[0] if exp.best_for else "general",
                        rating=exp.authentic_rating,
                        tags=list(exp.best_for),
                    )
                    for exp in selected
                ],
                meals=build_meals(prefs.dietary_restrictions),
                notes=_day_notes(day, specialist.seasonal_considerations),
            )
        )
    return plans


def collect_tips(specialist: SpecialistOutput) -> list[Tip]:
    """Advice-type insights plus every cultural note rendered as a do/don't tip."""
    tips = [
        Tip(
            category=insight.category,
            title=insight.title,
            content=insight.content,
            priority=insight.priority,
        )
        for insight in specialist.expert_insights
        if insight.category.lower() in TIP_INSIGHT_CATEGORIES
    ]
    for note in specialist.cultural_notes:
        content = note.description
        if note.do_and_dont:
            content = f"{content}\n\nDo's and Don'ts:\n" + "\n".join(note.do_and_dont)
        tips.append(
            Tip(
                category="cultural",
                title=note.aspect,
                content=content,
                priority=note.importance,
            )
        )
    return tips


def enrich_with_specialist_data(
    draft: ItineraryDraft,
    gatherer: GathererOutput,
    specialist: SpecialistOutput,
    putter: PutterOutput,
    *,
    max_daily_plans: int,
    max_activities_per_day: int,
    max_accommodations: int,
    max_dining: int,
) -> ItineraryDraft:
    """Stage 3: day plans, tips and seasonal notes, plus gatherer practicalities."""
    draft.daily_plan = build_daily_plans(
        draft,
        specialist,
        putter,
        max_daily_plans=max_daily_plans,
        max_activities_per_day=max_activities_per_day,
    )
    draft.tips = [*draft.tips, *collect_tips(specialist)]
    draft.notes = "\n".join(specialist.seasonal_considerations.recommendations)

    draft.accommodations = list(gatherer.accommodations[:max_accommodations])
    draft.transportation = list(gatherer.transportation)
    draft.dining = list(gatherer.dining[:max_dining])
    draft.activities = list(gatherer.current_attractions)
    return draft


def personalization_summary(putter: PutterOutput) -> str:
    prefs = _preferences(putter)
    lines: list[str] = []
    if prefs.travel_style:
        lines.append(f"Personalized for: {', '.join(prefs.travel_style)}")
    if prefs.interests:
        lines.append(f"Interests: {', '.join(prefs.interests)}")
    if prefs.dietary_restrictions:
        lines.append(f"Dietary considerations: {', '.join(prefs.dietary_restrictions)}")
    if putter.personalization.must_include:
        lines.append(f"Must include: {', '.join(putter.personalization.must_include)}")
    return "\n".join(lines)


def optimize_for_preferences(draft: ItineraryDraft, putter: PutterOutput) -> ItineraryDraft:
    """Stage 4: interest filtering, budget flexibility and personalization notes.

    The flexibility multiplier scales ``budget.total`` only; the breakdown is
    left as the architect proposed it, so the total can exceed its own sum.
    """
    prefs = _preferences(putter)

    if draft.daily_plan:
        draft.daily_plan = [
            day.model_copy(
                update={
                    "activities": [
                        activity
                        for activity in day.activities
                        if matches_interests(activity.tags, prefs.interests)
                    ]
                }
            )
            for day in draft.daily_plan
        ]

    if draft.budget is not None:
        multiplier = BUDGET_FLEXIBILITY_MULTIPLIERS[prefs.budget.flexibility]
        if multiplier != 1.0:
            draft.budget = draft.budget.model_copy(
                update={"total": round(draft.budget.total * multiplier, 2)}
            )

    summary = personalization_summary(putter)
    draft.notes = "\n\n".join(part for part in (draft.notes, summary) if part)
    return draft


def finalize_itinerary(
    draft: ItineraryDraft,
    putter: PutterOutput,
    *,
    default_currency: str,
    version: str,
    confidence: float,
    generated_at: datetime,
) -> Itinerary:
    """Stage 5: fill every absent field with a safe default and stamp metadata."""
    dates = putter.constraints.dates if putter.constraints else None
    duration = draft.duration or ItineraryDuration(
        days=DEFAULT_DAYS,
        nights=DEFAULT_DAYS - 1,
        start_date=dates.start if dates else None,
        end_date=dates.end if dates else None,
    )
    budget = draft.budget or Budget(
        total=0.0,
        currency=default_currency,
        breakdown=BudgetBreakdown(),
    )

    return Itinerary(
        title=draft.title or DEFAULT_TITLE,
        destination=draft.destination or DEFAULT_DESTINATION,
        duration=duration,
        travelers=draft.travelers or Travelers(adults=2, children=0),
        overview=draft.overview or DEFAULT_OVERVIEW,
        highlights=draft.highlights or [],
        daily_plan=(draft.daily_plan or [])[: duration.days],
        accommodations=draft.accommodations or [],
        transportation=draft.transportation or [],
        activities=draft.activities or [],
        dining=draft.dining or [],
        budget=budget,
        tips=draft.tips,
        notes=draft.notes or "",
        metadata=GenerationMetadata(
            generated_at=generated_at,
            version=version,
            confidence=confidence,
        ),
    )
