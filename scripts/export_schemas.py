"""Export JSON schemas for the public data contracts."""

import json
from pathlib import Path

from pydantic import TypeAdapter

from tripsynth.app.models import Itinerary, RoleOutput, SynthesisResult, TelemetrySnapshot


def main() -> None:
    """Export schemas to docs/schemas/."""
    schemas_dir = Path("docs/schemas")
    schemas_dir.mkdir(parents=True, exist_ok=True)

    schemas = {
        "RoleOutput": TypeAdapter(RoleOutput).json_schema(),
        "Itinerary": Itinerary.model_json_schema(),
        "SynthesisResult": SynthesisResult.model_json_schema(),
        "TelemetrySnapshot": TelemetrySnapshot.model_json_schema(),
    }
    for name, schema in schemas.items():
        path = schemas_dir / f"{name}.schema.json"
        with open(path, "w") as f:
            json.dump(schema, f, indent=2)
        print(f"Exported {name} schema to {path}")


if __name__ == "__main__":
    main()
