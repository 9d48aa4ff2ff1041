"""Tests for role output contracts and the tagged union."""

import pytest
from pydantic import TypeAdapter, ValidationError

from tripsynth.app.models import (
    ArchitectOutput,
    GathererOutput,
    PutterOutput,
    RoleOutput,
    SpecialistOutput,
    SynthesisRequest,
)
from tripsynth.app.synthesis.samples import sample_role_outputs

role_adapter: TypeAdapter[RoleOutput] = TypeAdapter(RoleOutput)


class TestRoleOutputUnion:
    """Test parsing payloads by their role discriminant."""

    def test_each_role_parses_to_its_variant(self) -> None:
        """Test that every sample output round-trips to its own class."""
        for output in sample_role_outputs():
            parsed = role_adapter.validate_python(output.model_dump(mode="json"))
            assert type(parsed) is type(output)

    def test_unknown_role_rejected(self) -> None:
        """Test that an unknown discriminant is a validation error."""
        with pytest.raises(ValidationError):
            role_adapter.validate_python({"role": "translator", "destination": "Rome"})

    def test_missing_role_rejected(self) -> None:
        """Test that a payload without a discriminant is rejected."""
        with pytest.raises(ValidationError):
            role_adapter.validate_python({"destination": "Rome"})

    def test_discriminant_selects_variant_without_probing(self) -> None:
        """Test that a sparse specialist payload is not mistaken for a gatherer."""
        parsed = role_adapter.validate_python({"role": "specialist", "destination": "Rome"})
        assert isinstance(parsed, SpecialistOutput)
        assert parsed.local_experiences == []

    def test_request_body_accepts_mixed_roles(self) -> None:
        """Test that a synthesis request parses a mixed list of role payloads."""
        payload = {
            "outputs": [o.model_dump(mode="json") for o in reversed(sample_role_outputs())],
            "session_id": "sess-1",
        }
        request = SynthesisRequest.model_validate(payload)
        assert [type(o) for o in request.outputs] == [
            PutterOutput,
            SpecialistOutput,
            GathererOutput,
            ArchitectOutput,
        ]


class TestRoleOutputFields:
    """Test field-level constraints."""

    def test_architect_confidence_bounded(self) -> None:
        """Test that architect confidence above 1 is rejected."""
        architect, *_ = sample_role_outputs()
        data = architect.model_dump()
        data["confidence"] = 1.2
        with pytest.raises(ValidationError):
            ArchitectOutput.model_validate(data)

    def test_negative_budget_rejected(self) -> None:
        """Test that a negative budget category is rejected."""
        architect, *_ = sample_role_outputs()
        data = architect.model_dump()
        data["budget"]["breakdown"]["dining"] = -1
        with pytest.raises(ValidationError):
            ArchitectOutput.model_validate(data)

    def test_putter_without_preferences_parses(self) -> None:
        """Test that missing preferences is left to synthesis validation."""
        putter = PutterOutput.model_validate({"role": "putter", "destination": "Rome"})
        assert putter.preferences is None
        assert putter.constraints is None

    def test_budget_breakdown_total(self) -> None:
        """Test that the breakdown sums its five categories."""
        architect, *_ = sample_role_outputs()
        assert architect.budget.breakdown.total() == 1000
