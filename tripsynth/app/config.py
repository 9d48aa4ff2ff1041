"""Typed settings configuration - single source of truth."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _default_operation_targets() -> dict[str, int]:
    return {
        "synthesis": 30000,
        "itinerary-update": 10000,
        "search-query": 5000,
        "agent-call": 15000,
        "cache-operation": 1000,
        "vector-search": 2000,
        # Per-role targets, looked up before the operation category
        "architect": 20000,
        "gatherer": 15000,
        "specialist": 18000,
        "putter": 12000,
    }


def _default_role_success_rates() -> dict[str, float]:
    return {
        "architect": 0.95,
        "gatherer": 0.9,
        "specialist": 0.92,
        "putter": 0.98,
    }


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Runtime tags stamped onto every metric
    environment: str = "development"
    app_version: str = "1.0.0"

    # Synthesis pipeline
    synthesis_version: str = "1.0.0"
    min_architect_confidence: float = 0.7
    max_daily_plans: int = 14
    max_activities_per_day: int = 4
    max_accommodations: int = 3
    max_dining_recommendations: int = 8
    default_currency: str = "USD"

    # Telemetry
    telemetry_enabled: bool = True
    metrics_retention_hours: int = 24

    # Duration targets (milliseconds), keyed by operation category or agent role
    operation_targets_ms: dict[str, int] = Field(default_factory=_default_operation_targets)

    # Per-role agent summaries
    role_min_success_rates: dict[str, float] = Field(default_factory=_default_role_success_rates)
    trend_change_ratio: float = 0.1
    agent_summary_window_minutes: int = 1440

    # Target classification (fraction over target)
    target_warning_deviation: float = 0.8
    target_critical_deviation: float = 1.2
    target_exceeded_multiplier: float = 1.5

    # Degradation detection
    degradation_threshold: float = 1.5
    degradation_window_minutes: int = 5
    degradation_min_samples: int = 5

    # Alert thresholds
    consecutive_failure_threshold: int = 3
    min_confidence_score: float = 0.7
    min_quality_score: float = 0.6
    max_cost_per_request: float = 0.10
    cost_per_token: float = 0.00002
    error_rate_alert_threshold: float = 0.25
    error_rate_critical_threshold: float = 0.5
    error_rate_window_minutes: int = 60
    error_rate_min_samples: int = 10

    # Alert suppression and retention (minutes)
    alert_dedup_minutes: int = 30
    performance_alert_dedup_minutes: int = 5
    resolved_alert_retention_minutes: int = 60

    # Slow operation logging (milliseconds)
    slow_operation_ms: int = 10000
    very_slow_operation_ms: int = 30000


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
