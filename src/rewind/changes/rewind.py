"""Rewind view: what changed in the window before an incident."""

from __future__ import annotations

from collections import Counter
from collections.abc import Sequence
from datetime import datetime, timedelta

from pydantic import BaseModel, Field

from rewind.models.base import ChangeEvent, EventType, RiskLevel


class TimelineEntry(BaseModel):
    event: ChangeEvent
    time_before_incident: str


class RewindTimeline(BaseModel):
    incident_at: datetime
    window_start: datetime
    entries: list[TimelineEntry] = Field(default_factory=list)
    events_by_service: dict[str, int] = Field(default_factory=dict)
    events_by_type: dict[str, int] = Field(default_factory=dict)
    most_recent_event: ChangeEvent | None = None


class QuickAssessment(BaseModel):
    """Coarse count-based triage; use the scoring engine for a ranked answer."""

    level: RiskLevel
    score: int
    factors: list[str] = Field(default_factory=list)


class RewindSummary(BaseModel):
    incident_at: datetime
    total_events: int
    risk_assessment: QuickAssessment
    recent_deployments: int
    recent_migrations: int
    services_affected: list[str] = Field(default_factory=list)
    environments_affected: list[str] = Field(default_factory=list)


def format_time_before(delta: timedelta) -> str:
    """``"2d 3h ago"``, ``"1h 5m ago"`` or ``"12m ago"``, truncating."""
    minutes = int(delta.total_seconds() // 60)
    hours, days = minutes // 60, minutes // (60 * 24)
    if days > 0:
        return f"{days}d {hours % 24}h ago"
    if hours > 0:
        return f"{hours}h {minutes % 60}m ago"
    return f"{minutes}m ago"


def build_timeline(
    events: Sequence[ChangeEvent], incident_at: datetime, window: timedelta
) -> RewindTimeline:
    """``events`` should already be windowed and ordered newest first."""
    return RewindTimeline(
        incident_at=incident_at,
        window_start=incident_at - window,
        entries=[
            TimelineEntry(
                event=e, time_before_incident=format_time_before(incident_at - e.occurred_at)
            )
            for e in events
        ],
        events_by_service=dict(Counter(e.service for e in events)),
        events_by_type=dict(Counter(e.type for e in events)),
        most_recent_event=max(events, key=lambda e: e.occurred_at) if events else None,
    )


_VERY_RECENT = timedelta(minutes=10)


def quick_assessment(events: Sequence[ChangeEvent], incident_at: datetime) -> QuickAssessment:
    if not events:
        return QuickAssessment(
            level=RiskLevel.LOW, score=0, factors=["No recent changes detected"]
        )

    score = 0
    factors: list[str] = []

    deployments = [e for e in events if e.is_type(EventType.DEPLOYMENT)]
    if deployments:
        score += len(deployments) * 20
        factors.append(f"{len(deployments)} recent deployment(s)")

    migrations = [e for e in events if e.is_type(EventType.MIGRATION)]
    if migrations:
        score += len(migrations) * 30
        factors.append(f"{len(migrations)} database migration(s)")

    very_recent = [e for e in events if incident_at - e.occurred_at < _VERY_RECENT]
    if very_recent:
        score += len(very_recent) * 25
        factors.append(f"{len(very_recent)} change(s) within 10 minutes of incident")

    services = {e.service for e in events}
    if len(services) > 2:
        score += 15
        factors.append(f"Multiple services affected ({len(services)})")

    if score >= 80:
        level = RiskLevel.CRITICAL
    elif score >= 50:
        level = RiskLevel.HIGH
    elif score >= 25:
        level = RiskLevel.MEDIUM
    else:
        level = RiskLevel.LOW
    return QuickAssessment(level=level, score=min(score, 100), factors=factors)


def summarize(events: Sequence[ChangeEvent], incident_at: datetime) -> RewindSummary:
    return RewindSummary(
        incident_at=incident_at,
        total_events=len(events),
        risk_assessment=quick_assessment(events, incident_at),
        recent_deployments=sum(1 for e in events if e.is_type(EventType.DEPLOYMENT)),
        recent_migrations=sum(1 for e in events if e.is_type(EventType.MIGRATION)),
        services_affected=sorted({e.service for e in events}),
        environments_affected=sorted({e.environment for e in events}),
    )
