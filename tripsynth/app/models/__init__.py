"""Models package - re-exports for convenience."""

from tripsynth.app.models.common import (
    AccessDifficulty,
    AgentRole,
    AlertKind,
    BudgetFlexibility,
    OperationCategory,
    Priority,
    Severity,
    TimeRange,
)
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
    ArchitectOutput,
    BudgetBreakdown,
    GathererOutput,
    PutterOutput,
    RoleOutput,
    SpecialistOutput,
)
from tripsynth.app.models.synthesis import SynthesisMetadata, SynthesisRequest, SynthesisResult
from tripsynth.app.models.telemetry import (
    AgentReport,
    AgentSummary,
    Alert,
    AlertDetails,
    ExecutionMetric,
    MetricMetadata,
    Percentiles,
    PerformanceSummary,
    Stats,
    TelemetryHealth,
    TelemetrySnapshot,
)

__all__ = [
    # Common
    "AccessDifficulty",
    "AgentRole",
    "AlertKind",
    "BudgetFlexibility",
    "OperationCategory",
    "Priority",
    "Severity",
    "TimeRange",
    # Role outputs
    "RoleOutput",
    "ArchitectOutput",
    "GathererOutput",
    "SpecialistOutput",
    "PutterOutput",
    "BudgetBreakdown",
    # Itinerary
    "Itinerary",
    "ItineraryDuration",
    "Travelers",
    "DailyPlan",
    "PlannedActivity",
    "Meal",
    "Budget",
    "Tip",
    "GenerationMetadata",
    # Synthesis
    "SynthesisResult",
    "SynthesisMetadata",
    "SynthesisRequest",
    # Telemetry
    "ExecutionMetric",
    "MetricMetadata",
    "Stats",
    "Percentiles",
    "Alert",
    "AlertDetails",
    "PerformanceSummary",
    "AgentSummary",
    "AgentReport",
    "TelemetryHealth",
    "TelemetrySnapshot",
]
