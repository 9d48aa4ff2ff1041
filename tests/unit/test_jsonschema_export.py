"""Test JSON schema export and serialization of the public contracts."""

import json
import os
import subprocess
import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest
from pydantic import ValidationError

from tripsynth.app.config import Settings
from tripsynth.app.models import Itinerary, SynthesisResult
from tripsynth.app.synthesis.coordinator import SynthesisCoordinator
from tripsynth.app.synthesis.samples import sample_role_outputs
from tripsynth.app.utils.clock import ManualClock

ROOT = Path(__file__).resolve().parents[2]
SCHEMA_NAMES = ["RoleOutput", "Itinerary", "SynthesisResult", "TelemetrySnapshot"]


@pytest.fixture(scope="module")
def schemas_dir(tmp_path_factory: pytest.TempPathFactory) -> Path:
    """Export schemas into a scratch directory."""
    workdir = tmp_path_factory.mktemp("schemas")
    env = {**os.environ, "PYTHONPATH": str(ROOT)}
    result = subprocess.run(
        [sys.executable, str(ROOT / "scripts" / "export_schemas.py")],
        capture_output=True,
        text=True,
        cwd=workdir,
        env=env,
    )
    assert result.returncode == 0, f"Schema export failed: {result.stderr}"
    return workdir / "docs" / "schemas"


@pytest.fixture
def result() -> SynthesisResult:
    coordinator = SynthesisCoordinator(
        settings=Settings(),
        clock=ManualClock(datetime(2025, 6, 1, tzinfo=timezone.utc)),
    )
    return coordinator.synthesize(*sample_role_outputs("Lisbon"))


def test_schemas_exist(schemas_dir: Path) -> None:
    for name in SCHEMA_NAMES:
        assert (schemas_dir / f"{name}.schema.json").exists()


def test_role_output_schema_is_discriminated(schemas_dir: Path) -> None:
    """Test that the union schema dispatches on the role field."""
    with open(schemas_dir / "RoleOutput.schema.json") as f:
        schema = json.load(f)
    assert schema["discriminator"]["propertyName"] == "role"
    assert set(schema["discriminator"]["mapping"]) == {
        "architect",
        "gatherer",
        "specialist",
        "putter",
    }


def test_result_schema_has_title(schemas_dir: Path) -> None:
    with open(schemas_dir / "SynthesisResult.schema.json") as f:
        schema = json.load(f)
    assert schema["title"] == "SynthesisResult"


def test_result_roundtrip(result: SynthesisResult) -> None:
    restored = SynthesisResult.model_validate_json(result.model_dump_json())
    assert restored == result


def test_itinerary_rejects_extra_days(result: SynthesisResult) -> None:
    """Test that a day sequence longer than the trip fails validation."""
    assert result.itinerary is not None
    data = result.itinerary.model_dump()
    data["daily_plan"] = data["daily_plan"] + data["daily_plan"]

    with pytest.raises(ValidationError):
        Itinerary.model_validate(data)
