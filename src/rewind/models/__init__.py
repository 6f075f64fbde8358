"""Core data models for Change Rewind."""

from rewind.models.base import (
    BatchAssessment,
    ChangeEvent,
    Correlation,
    CorrelationKind,
    EnvironmentTier,
    EventType,
    IncidentContext,
    RiskLevel,
    ScoredEvent,
    ScoreFactor,
    ScoreResult,
    Severity,
)

__all__ = [
    "BatchAssessment",
    "ChangeEvent",
    "Correlation",
    "CorrelationKind",
    "EnvironmentTier",
    "EventType",
    "IncidentContext",
    "RiskLevel",
    "ScoreFactor",
    "ScoreResult",
    "ScoredEvent",
    "Severity",
]
