"""Telemetry models - execution metrics, statistics and alerts."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from tripsynth.app.models.common import AlertKind, Severity, TimeRange

HealthStatus = Literal["healthy", "degraded", "unhealthy"]
Trend = Literal["improving", "stable", "degrading"]
CostTrend = Literal["increasing", "stable", "decreasing"]


class MetricMetadata(BaseModel):
    """Caller-supplied context for one operation."""

    model_config = ConfigDict(extra="allow")

    user_id: str | None = None
    session_id: str | None = None
    agent_role: str | None = None
    provider_name: str | None = None
    result_count: int | None = None
    cache_hit: bool | None = None
    retry_count: int | None = None
    confidence: float | None = None
    quality: float | None = None
    estimated_cost: float | None = None
    prompt_tokens: int | None = None
    completion_tokens: int | None = None


class ExecutionMetric(BaseModel):
    """One timed, outcome-tagged record of an operation.

    Records are immutable; completion replaces the stored record with a copy.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    category: str
    operation_id: str
    start_time: datetime
    end_time: datetime | None = None
    duration_ms: float | None = None
    success: bool = False
    error_kind: str | None = None
    tags: dict[str, str] = Field(default_factory=dict)
    metadata: MetricMetadata = Field(default_factory=MetricMetadata)

    @property
    def completed(self) -> bool:
        return self.end_time is not None

    @property
    def subject(self) -> str:
        """Agent role when the caller reported one, else the category."""
        return self.metadata.agent_role or self.category

    @property
    def total_tokens(self) -> int:
        return (self.metadata.prompt_tokens or 0) + (self.metadata.completion_tokens or 0)

    def cost(self, cost_per_token: float) -> float | None:
        """Reported cost, else an estimate from token usage; None without either."""
        if self.metadata.estimated_cost is not None:
            return self.metadata.estimated_cost
        tokens = self.total_tokens
        return tokens * cost_per_token if tokens else None


class Percentiles(BaseModel):
    p50: float
    p75: float
    p90: float
    p95: float
    p99: float


class Stats(BaseModel):
    """Aggregates over the completed metrics of one category (or agent role) in a window."""

    category: str
    time_range: TimeRange
    count: int
    success_count: int
    error_count: int
    success_rate: float
    error_rate: float
    mean_ms: float
    median_ms: float
    min_ms: float
    max_ms: float
    percentiles: Percentiles
    throughput: float  # operations per second over the window


class TargetCheck(BaseModel):
    """Comparison of one duration against its category target."""

    meets_target: bool
    target_ms: float
    deviation: float
    severity: Literal["good", "warning", "critical"]


class AlertDetails(BaseModel):
    current_value: float
    threshold: float
    target: float | None = None
    time_range: TimeRange
    affected_operations: int = 1


class Alert(BaseModel):
    """Deduplicated, manually resolvable notification."""

    id: str
    kind: AlertKind
    severity: Severity
    subject: str
    message: str
    details: AlertDetails
    recommendations: list[str] = Field(default_factory=list)
    created_at: datetime
    resolved: bool = False
    resolved_at: datetime | None = None


class OverallPerformance(BaseModel):
    total_operations: int
    success_rate: float
    mean_ms: float
    p95_ms: float


class CategoryPerformance(BaseModel):
    count: int
    success_rate: float
    mean_ms: float
    target_compliance: float


class PerformanceSummary(BaseModel):
    """Operator-facing roll-up across every category."""

    overall: OverallPerformance
    by_category: dict[str, CategoryPerformance]
    alerts: list[Alert]
    recommendations: list[str]


class AgentSummary(BaseModel):
    """Performance, quality and cost of one agent role over a window."""

    role: str
    stats: Stats
    average_confidence: float | None = None
    average_quality: float | None = None
    total_tokens: int = 0
    total_cost: float = 0.0
    average_cost: float = 0.0
    average_retries: float = 0.0
    error_rates: dict[str, float] = Field(default_factory=dict)  # share of executions per kind
    min_success_rate: float | None = None
    meets_success_target: bool = True
    performance_trend: Trend = "stable"
    quality_trend: Trend = "stable"
    cost_trend: CostTrend = "stable"


class AgentReport(BaseModel):
    """Per-role summaries with the advice derived from them."""

    agents: dict[str, AgentSummary]
    recommendations: list[str]


class TelemetryHealth(BaseModel):
    status: HealthStatus
    metrics_collected: int
    active_alerts: int
    mean_ms: float
    error: str | None = None


class TelemetrySnapshot(BaseModel):
    """Point-in-time export for dashboards."""

    metrics: list[ExecutionMetric]
    stats: dict[str, Stats]
    alerts: list[Alert]
    timestamp: datetime
    agents: dict[str, AgentSummary] = Field(default_factory=dict)
