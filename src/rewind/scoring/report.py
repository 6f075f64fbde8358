"""JSON-ready incident reports built from scoring results."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from rewind.models.base import BatchAssessment, ChangeEvent, IncidentContext, ScoreResult
from rewind.scoring.constants import CRITICAL_RISK_EVENT_SCORE, HIGH_RISK_EVENT_SCORE


def _incident_block(context: IncidentContext) -> dict[str, Any]:
    return {
        "occurred_at": context.incident_at.isoformat(),
        "service": context.service or "unknown",
        "environment": context.environment or "unknown",
        "severity": context.severity.value if context.severity else None,
        "description": context.description or "No description provided",
    }


def _event_block(event: ChangeEvent) -> dict[str, Any]:
    return event.model_dump(mode="json")


def build_incident_report(
    assessment: BatchAssessment,
    context: IncidentContext,
    window_start: datetime,
    window_label: str,
) -> dict[str, Any]:
    """Everything an operator needs to triage the changes before an incident."""
    individual = assessment.individual_scores
    return {
        "incident": _incident_block(context),
        "analysis_window": {
            "from": window_start.isoformat(),
            "to": context.incident_at.isoformat(),
            "duration": window_label,
        },
        "overall_assessment": assessment.overall_score.model_dump(mode="json"),
        "individual_scores": [
            {
                "event": _event_block(item.event),
                "risk_assessment": item.score.model_dump(mode="json"),
            }
            for item in individual
        ],
        "correlations": [
            {
                "kind": c.kind.value,
                "event_ids": [e.id for e in c.events],
                "description": c.description,
                "risk_increase": c.risk_increase,
            }
            for c in assessment.correlations
        ],
        "summary": {
            "total_events_analyzed": len(individual),
            "high_risk_events": sum(
                1 for item in individual if item.score.score >= HIGH_RISK_EVENT_SCORE
            ),
            "critical_risk_events": sum(
                1 for item in individual if item.score.score >= CRITICAL_RISK_EVENT_SCORE
            ),
            "correlations_found": len(assessment.correlations),
        },
    }


def build_event_report(
    event: ChangeEvent,
    context: IncidentContext,
    result: ScoreResult,
    related_events: int,
) -> dict[str, Any]:
    return {
        "event": _event_block(event),
        "incident_context": _incident_block(context),
        "risk_assessment": result.model_dump(mode="json"),
        "related_context": {
            "total_related_events": related_events,
            "analysis_period": "24 hours before incident",
        },
    }
