"""Data models shared by the scoring engine and its callers."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field, field_validator


class RiskLevel(StrEnum):
    """Discretization of a 0-100 risk score."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class Severity(StrEnum):
    """Severity reported for an incident."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class EventType(StrEnum):
    """Known change event categories. ``OTHER`` covers anything unmapped."""

    MIGRATION = "migration"
    HOTFIX = "hotfix"
    INFRASTRUCTURE = "infrastructure"
    DEPLOYMENT = "deployment"
    CONFIG_CHANGE = "config-change"
    FEATURE_FLAG = "feature-flag"
    SCALING = "scaling"
    ROLLBACK = "rollback"
    MAINTENANCE = "maintenance"
    OTHER = "other"

    @classmethod
    def classify(cls, raw: str) -> EventType:
        try:
            member = cls(raw.lower())
        except ValueError:
            return cls.OTHER
        return member


class EnvironmentTier(StrEnum):
    """Deployment tier an event landed in. ``OTHER`` covers unknown names."""

    PRODUCTION = "production"
    STAGING = "staging"
    DEVELOPMENT = "development"
    TEST = "test"
    OTHER = "other"

    @classmethod
    def classify(cls, raw: str) -> EnvironmentTier:
        return _ENVIRONMENT_ALIASES.get(raw.lower(), cls.OTHER)


_ENVIRONMENT_ALIASES: dict[str, EnvironmentTier] = {
    "prod": EnvironmentTier.PRODUCTION,
    "production": EnvironmentTier.PRODUCTION,
    "staging": EnvironmentTier.STAGING,
    "dev": EnvironmentTier.DEVELOPMENT,
    "development": EnvironmentTier.DEVELOPMENT,
    "test": EnvironmentTier.TEST,
}


class CorrelationKind(StrEnum):
    """Patterns across a batch of events that compound risk."""

    DEPLOYMENT_CHAIN = "deployment_chain"
    MIGRATION_WITH_DEPLOYMENT = "migration_with_deployment"
    CROSS_SERVICE = "cross_service"


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


class ChangeEvent(BaseModel):
    """A recorded modification to a service in some environment."""

    id: str
    occurred_at: datetime
    service: str
    environment: str
    type: str
    source: str = ""
    summary: str = ""
    meta: dict[str, Any] = Field(default_factory=dict)

    model_config = {"frozen": True}

    @field_validator("occurred_at")
    @classmethod
    def _occurred_at_utc(cls, value: datetime) -> datetime:
        return _as_utc(value)

    def is_type(self, event_type: EventType) -> bool:
        """Exact, case-sensitive match on the raw ``type`` string."""
        return self.type == event_type.value


class IncidentContext(BaseModel):
    """The observed failure used as the scoring anchor."""

    incident_at: datetime
    service: str | None = None
    environment: str | None = None
    severity: Severity | None = None
    description: str | None = None

    model_config = {"frozen": True}

    @field_validator("incident_at")
    @classmethod
    def _incident_at_utc(cls, value: datetime) -> datetime:
        return _as_utc(value)


class ScoreFactor(BaseModel):
    """One weighted input to an event's risk score."""

    name: str
    score: float = Field(ge=0.0, le=100.0)
    weight: float
    description: str
    evidence: list[str] = Field(default_factory=list)

    @property
    def contribution(self) -> float:
        return self.score * self.weight


class ScoreResult(BaseModel):
    """Risk assessment for one event, or for a whole batch."""

    score: int = Field(ge=0, le=100)
    level: RiskLevel
    explanation: str
    factors: list[ScoreFactor] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)


class Correlation(BaseModel):
    """A pattern across several events that adds risk to the aggregate."""

    kind: CorrelationKind
    events: list[ChangeEvent]
    description: str
    risk_increase: int


class ScoredEvent(BaseModel):
    event: ChangeEvent
    score: ScoreResult


class BatchAssessment(BaseModel):
    """Result of scoring every change event recorded before an incident."""

    overall_score: ScoreResult
    individual_scores: list[ScoredEvent] = Field(default_factory=list)
    correlations: list[Correlation] = Field(default_factory=list)
