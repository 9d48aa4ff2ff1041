"""Tests for the synthesis coordinator."""

import random

import pytest

from tripsynth.app.config import Settings
from tripsynth.app.models.common import OperationCategory
from tripsynth.app.models.roles import (
    ArchitectOutput,
    GathererOutput,
    PutterOutput,
    SourceCitation,
    SpecialistOutput,
    TravelerCounts,
    TripDuration,
)
from tripsynth.app.services import TelemetryServices
from tripsynth.app.synthesis.coordinator import SynthesisCoordinator
from tripsynth.app.synthesis.samples import sample_role_outputs

RoleQuadruple = tuple[ArchitectOutput, GathererOutput, SpecialistOutput, PutterOutput]

DESTINATIONS = ["Lisbon", "Kyoto", "Oaxaca", "Reykjavik", "Tbilisi", "Hanoi"]


@pytest.fixture
def coordinator(settings: Settings) -> SynthesisCoordinator:
    return SynthesisCoordinator(settings=settings)


def random_outputs(rng: random.Random, destination: str) -> RoleQuadruple:
    """Valid quadruple with randomized trip length, party size and confidence."""
    architect, gatherer, specialist, putter = sample_role_outputs(destination)
    days = rng.randint(1, 30)
    architect = architect.model_copy(
        update={
            "duration": TripDuration(days=days, nights=max(0, days - 1)),
            "travelers": TravelerCounts(adults=rng.randint(0, 4), children=rng.randint(0, 3)),
            "confidence": rng.uniform(0.7, 1.0),
        }
    )
    if rng.random() < 0.5:
        gatherer = gatherer.model_copy(update={"sources": []})
    return architect, gatherer, specialist, putter


class TestSynthesize:
    """Test the end-to-end pipeline."""

    def test_success(
        self, coordinator: SynthesisCoordinator, role_outputs: RoleQuadruple
    ) -> None:
        """Test a valid quadruple produces a scored itinerary."""
        result = coordinator.synthesize(*role_outputs)

        assert result.success is True
        assert result.errors == []
        assert result.itinerary is not None
        assert result.itinerary.destination == "Lisbon"
        assert len(result.itinerary.daily_plan) == 3
        assert result.confidence == pytest.approx(0.895)
        assert result.quality == pytest.approx(0.8)
        assert result.itinerary.metadata.quality == result.quality
        assert result.metadata.roles_used == ["architect", "gatherer", "specialist", "putter"]
        assert result.metadata.sources_count == 1

    def test_high_confidence_scenario(
        self, coordinator: SynthesisCoordinator, role_outputs: RoleQuadruple
    ) -> None:
        """Test a confident architect with three sources and two insights."""
        architect, gatherer, specialist, putter = role_outputs
        architect = architect.model_copy(update={"confidence": 0.95})
        gatherer = gatherer.model_copy(
            update={"sources": [SourceCitation(url=f"https://e.com/{i}") for i in range(3)]}
        )
        specialist = specialist.model_copy(
            update={"expert_insights": specialist.expert_insights * 2}
        )

        result = coordinator.synthesize(architect, gatherer, specialist, putter)

        assert result.success is True
        assert result.confidence >= 0.85

    def test_low_confidence_rejected(
        self, coordinator: SynthesisCoordinator, role_outputs: RoleQuadruple
    ) -> None:
        """Test that an architect below the floor fails validation."""
        architect, gatherer, specialist, putter = role_outputs
        architect = architect.model_copy(update={"confidence": 0.5})

        result = coordinator.synthesize(architect, gatherer, specialist, putter)

        assert result.success is False
        assert result.itinerary is None
        assert any("confidence" in e.lower() for e in result.errors)

    def test_internal_fault_reported(
        self,
        coordinator: SynthesisCoordinator,
        role_outputs: RoleQuadruple,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Test that an unexpected stage error becomes a single failure message."""

        def explode(*args: object, **kwargs: object) -> None:
            raise RuntimeError("boom")

        monkeypatch.setattr(
            "tripsynth.app.synthesis.coordinator.enrich_with_specialist_data", explode
        )

        result = coordinator.synthesize(*role_outputs)

        assert result.success is False
        assert result.itinerary is None
        assert result.errors == ["Synthesis failed: boom"]

    def test_warnings_for_sparse_outputs(
        self, coordinator: SynthesisCoordinator, role_outputs: RoleQuadruple
    ) -> None:
        result = coordinator.synthesize(*role_outputs)
        assert "No accommodation options available" in result.warnings


class TestSynthesizeProperties:
    """Seeded property checks over randomized inputs."""

    def test_matching_destinations_succeed(self, coordinator: SynthesisCoordinator) -> None:
        rng = random.Random(42)
        for _ in range(50):
            destination = rng.choice(DESTINATIONS)
            architect, gatherer, specialist, putter = random_outputs(rng, destination)

            result = coordinator.synthesize(architect, gatherer, specialist, putter)

            assert result.success is True, result.errors
            assert result.itinerary is not None
            assert result.itinerary.destination == destination
            assert 0.0 <= result.confidence <= 1.0
            assert 0.0 <= result.quality <= 1.0
            assert len(result.itinerary.daily_plan) <= min(architect.duration.days, 14)

    def test_mismatched_destinations_fail(self, coordinator: SynthesisCoordinator) -> None:
        rng = random.Random(7)
        for _ in range(50):
            first, second = rng.sample(DESTINATIONS, 2)
            architect, gatherer, specialist, putter = random_outputs(rng, first)
            target = rng.choice(["gatherer", "specialist", "putter"])
            if target == "gatherer":
                gatherer = gatherer.model_copy(update={"destination": second})
            elif target == "specialist":
                specialist = specialist.model_copy(update={"destination": second})
            else:
                putter = putter.model_copy(update={"destination": second})

            result = coordinator.synthesize(architect, gatherer, specialist, putter)

            assert result.success is False
            assert result.itinerary is None
            assert result.errors


class TestSynthesizeOutputs:
    """Test dispatch over an unordered collection of role outputs."""

    def test_any_order(
        self, coordinator: SynthesisCoordinator, role_outputs: RoleQuadruple
    ) -> None:
        result = coordinator.synthesize_outputs(list(reversed(role_outputs)))
        assert result.success is True

    def test_missing_role(
        self, coordinator: SynthesisCoordinator, role_outputs: RoleQuadruple
    ) -> None:
        result = coordinator.synthesize_outputs(list(role_outputs[:3]))
        assert result.success is False
        assert result.errors == ["Missing role outputs: putter"]

    def test_duplicate_role(
        self, coordinator: SynthesisCoordinator, role_outputs: RoleQuadruple
    ) -> None:
        result = coordinator.synthesize_outputs([*role_outputs, role_outputs[0]])
        assert result.success is False
        assert "Duplicate architect output" in result.errors


class TestSynthesisTelemetry:
    """Test that each synthesis is recorded as a metric."""

    def test_success_recorded(
        self, services: TelemetryServices, role_outputs: RoleQuadruple
    ) -> None:
        result = services.coordinator.synthesize(*role_outputs, session_id="sess-1")

        metrics = services.collector.completed(OperationCategory.synthesis.value)
        assert len(metrics) == 1
        metric = metrics[0]
        assert metric.success is True
        assert metric.tags["destination"] == "Lisbon"
        assert metric.metadata.session_id == "sess-1"
        assert metric.metadata.confidence == pytest.approx(result.confidence)
        assert metric.metadata.quality == pytest.approx(result.quality)
        assert metric.metadata.result_count == 3

    def test_validation_failure_recorded(
        self, services: TelemetryServices, role_outputs: RoleQuadruple
    ) -> None:
        architect, gatherer, specialist, putter = role_outputs
        architect = architect.model_copy(update={"confidence": 0.2})

        services.coordinator.synthesize(architect, gatherer, specialist, putter)

        metric = services.collector.completed("synthesis")[0]
        assert metric.success is False
        assert metric.error_kind == "validation"
        assert metric.metadata.confidence is None

    def test_rejected_role_set_recorded(
        self, services: TelemetryServices, role_outputs: RoleQuadruple
    ) -> None:
        """Test that missing or duplicate roles still produce a failed synthesis metric."""
        services.coordinator.synthesize_outputs(list(role_outputs[:3]), session_id="sess-2")
        services.coordinator.synthesize_outputs([*role_outputs, role_outputs[1]])

        metrics = services.collector.completed("synthesis")
        assert [m.success for m in metrics] == [False, False]
        assert [m.error_kind for m in metrics] == ["validation", "validation"]
        assert metrics[0].tags["destination"] == "Lisbon"
        assert metrics[0].metadata.session_id == "sess-2"

    def test_rejected_role_set_without_architect(
        self, services: TelemetryServices, role_outputs: RoleQuadruple
    ) -> None:
        services.coordinator.synthesize_outputs(list(role_outputs[1:]))

        metric = services.collector.completed("synthesis")[0]
        assert metric.success is False
        assert metric.tags["destination"] == "unknown"

    def test_telemetry_fault_does_not_break_synthesis(
        self,
        services: TelemetryServices,
        role_outputs: RoleQuadruple,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Test that alert evaluation errors never reach the caller."""

        def explode(*args: object, **kwargs: object) -> None:
            raise RuntimeError("alerting down")

        monkeypatch.setattr(services.alerting, "evaluate", explode)

        result = services.coordinator.synthesize(*role_outputs)

        assert result.success is True


class TestHealthCheck:
    def test_sample_run_is_healthy(self, coordinator: SynthesisCoordinator) -> None:
        health = coordinator.health_check()
        assert health["status"] == "healthy"
        assert health["latency_ms"] >= 0
