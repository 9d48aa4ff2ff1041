"""Common types and enums shared across all models."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel


class AgentRole(str, Enum):
    """AI generation role that produced a structured output."""

    architect = "architect"
    gatherer = "gatherer"
    specialist = "specialist"
    putter = "putter"


class Priority(str, Enum):
    """Priority / importance level for insights, tips and cultural notes."""

    high = "high"
    medium = "medium"
    low = "low"


class BudgetFlexibility(str, Enum):
    """How far the traveler tolerates going over the stated budget."""

    strict = "strict"
    moderate = "moderate"
    flexible = "flexible"


class AccessDifficulty(str, Enum):
    """How hard a hidden gem is to reach."""

    easy = "easy"
    medium = "medium"
    hard = "hard"


class OperationCategory(str, Enum):
    """Well-known operation categories.

    The metric category field is an open set of strings; these are the values
    the rest of the system reports with.
    """

    synthesis = "synthesis"
    agent_call = "agent-call"
    search_query = "search-query"
    itinerary_update = "itinerary-update"
    cache_operation = "cache-operation"
    vector_search = "vector-search"
    api_request = "api-request"
    workflow_execution = "workflow-execution"


class Severity(str, Enum):
    """Alert severity."""

    low = "low"
    medium = "medium"
    high = "high"
    critical = "critical"


class AlertKind(str, Enum):
    """Closed set of alert kinds."""

    slow_response = "slow-response"
    high_error_rate = "high-error-rate"
    performance_degradation = "performance-degradation"
    target_exceeded = "target-exceeded"
    quality_degradation = "quality-degradation"
    consecutive_failures = "consecutive-failures"
    high_cost = "high-cost"


class TimeRange(BaseModel):
    """Closed time interval."""

    start: datetime
    end: datetime
