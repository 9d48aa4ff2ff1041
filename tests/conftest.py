"""Shared pytest fixtures for all test suites."""

from datetime import datetime, timezone

import pytest

from tripsynth.app.config import Settings
from tripsynth.app.models.roles import (
    AccommodationOption,
    ArchitectOutput,
    CulturalNote,
    DiningOption,
    ExpertInsight,
    GathererOutput,
    LocalExperience,
    PutterOutput,
    SourceCitation,
    SpecialistOutput,
    TransportationOption,
)
from tripsynth.app.services import TelemetryServices, build_services
from tripsynth.app.synthesis.samples import sample_role_outputs
from tripsynth.app.utils.clock import ManualClock

RoleQuadruple = tuple[ArchitectOutput, GathererOutput, SpecialistOutput, PutterOutput]


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock(datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def settings() -> Settings:
    return Settings(environment="test", app_version="9.9.9")


@pytest.fixture
def services(settings: Settings, clock: ManualClock) -> TelemetryServices:
    """Fully wired container on a fake clock with no-op metric export."""
    return build_services(settings=settings, clock=clock)


@pytest.fixture
def role_outputs() -> RoleQuadruple:
    """Minimal valid quadruple for Lisbon."""
    return sample_role_outputs("Lisbon")


@pytest.fixture
def rich_role_outputs() -> RoleQuadruple:
    """Valid quadruple with practicalities, cultural notes and several experiences."""
    architect, gatherer, specialist, putter = sample_role_outputs("Lisbon")

    gatherer = gatherer.model_copy(
        update={
            "accommodations": [
                AccommodationOption(name=f"Hotel {i}", price_range="$$") for i in range(5)
            ],
            "dining": [DiningOption(name=f"Tasca {i}", cuisine="Portuguese") for i in range(10)],
            "transportation": [
                TransportationOption(type="tram", from_location="Baixa", to_location="Belem")
            ],
            "sources": [
                SourceCitation(url=f"https://example.com/lisbon/{i}", title=f"Guide {i}")
                for i in range(3)
            ],
        }
    )
    specialist = specialist.model_copy(
        update={
            "expert_insights": [
                ExpertInsight(category="tips", title="Ride tram 28 early", content="Before 9am."),
                ExpertInsight(category="history", title="1755 earthquake", content="Context."),
            ],
            "local_experiences": [
                LocalExperience(name="Fado Night", best_for=["music", "culture"], cost=40),
                LocalExperience(name="Surf Lesson", best_for=["adventure"], cost=60),
                LocalExperience(name="Tile Workshop", best_for=["culture", "art"], cost=35),
            ],
            "cultural_notes": [
                CulturalNote(
                    aspect="Greetings",
                    description="Two kisses among friends.",
                    do_and_dont=["Do say bom dia", "Don't rush meals"],
                )
            ],
        }
    )
    return architect.model_copy(update={"confidence": 0.95}), gatherer, specialist, putter
