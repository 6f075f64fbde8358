"""The five independent risk factors for a single change event.

Each calculator is a pure function of its inputs and returns a
:class:`ScoreFactor` whose score lies in ``[0, 100]``.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import timedelta

from rewind.models.base import ChangeEvent, EventType, IncidentContext, ScoreFactor
from rewind.scoring import narrative
from rewind.scoring.constants import (
    BLAST_FEW_SERVICES_MAX,
    BLAST_FEW_SERVICES_SCORE,
    BLAST_MANY_SERVICES_SCORE,
    BLAST_META_BONUSES,
    BLAST_RADIUS,
    BLAST_SINGLE_SERVICE_SCORE,
    BLAST_WINDOW_MINUTES,
    CHANGE_FREQUENCY,
    DEFAULT_SERVICE_SCORE,
    EVENT_TYPE_RISK,
    EVENT_TYPE_SCORES,
    FACTOR_WEIGHTS,
    FREQUENCY_BUCKETS,
    FREQUENCY_VERY_HIGH_SCORE,
    FREQUENCY_WINDOW_HOURS,
    SAME_SERVICE_SCORE,
    SERVICE_CRITICALITY,
    SERVICE_PATTERNS,
    TIMING_AFTER_INCIDENT_SCORE,
    TIMING_BUCKETS,
    TIMING_DISTANT_SCORE,
    TIMING_PROXIMITY,
)
from rewind.scoring.numeric import clamp


def minutes_before_incident(event: ChangeEvent, context: IncidentContext) -> float:
    """Minutes from the change to the incident; negative if the change came after."""
    return (context.incident_at - event.occurred_at).total_seconds() / 60


def timing_score(minutes_diff: float) -> int:
    if minutes_diff < 0:
        return TIMING_AFTER_INCIDENT_SCORE
    for upper_bound, score in TIMING_BUCKETS:
        if minutes_diff <= upper_bound:
            return score
    return TIMING_DISTANT_SCORE


def calculate_timing_proximity(event: ChangeEvent, context: IncidentContext) -> ScoreFactor:
    minutes_diff = minutes_before_incident(event, context)
    score = timing_score(minutes_diff)
    description, evidence = narrative.describe_timing(minutes_diff, score)
    return ScoreFactor(
        name=TIMING_PROXIMITY,
        score=score,
        weight=FACTOR_WEIGHTS[TIMING_PROXIMITY],
        description=description,
        evidence=evidence,
    )


def calculate_event_type_risk(event: ChangeEvent) -> ScoreFactor:
    event_type = EventType.classify(event.type)
    description, evidence = narrative.describe_event_type(event, event_type)
    return ScoreFactor(
        name=EVENT_TYPE_RISK,
        score=EVENT_TYPE_SCORES[event_type],
        weight=FACTOR_WEIGHTS[EVENT_TYPE_RISK],
        description=description,
        evidence=evidence,
    )


def match_service_pattern(service: str) -> tuple[str | None, int]:
    """Return the first matching pattern group and its score, by priority."""
    name = service.lower()
    for group, needles, score in SERVICE_PATTERNS:
        if any(needle in name for needle in needles):
            return group, score
    return None, DEFAULT_SERVICE_SCORE


def calculate_service_criticality(event: ChangeEvent, context: IncidentContext) -> ScoreFactor:
    same_service = bool(context.service) and event.service == context.service
    if same_service:
        group, score = None, SAME_SERVICE_SCORE
    else:
        group, score = match_service_pattern(event.service)
    description, evidence = narrative.describe_service(
        event.service, same_as_incident=same_service, group=group
    )
    return ScoreFactor(
        name=SERVICE_CRITICALITY,
        score=score,
        weight=FACTOR_WEIGHTS[SERVICE_CRITICALITY],
        description=description,
        evidence=evidence,
    )


def count_recent_changes(
    event: ChangeEvent, all_events: Sequence[ChangeEvent], context: IncidentContext
) -> int:
    """Changes to the same service in the 24h up to and including the incident."""
    window_start = context.incident_at - timedelta(hours=FREQUENCY_WINDOW_HOURS)
    return sum(
        1
        for other in all_events
        if other.service == event.service
        and window_start <= other.occurred_at <= context.incident_at
    )


def frequency_score(count: int) -> int:
    for max_count, score in FREQUENCY_BUCKETS:
        if count <= max_count:
            return score
    return FREQUENCY_VERY_HIGH_SCORE


def calculate_change_frequency(
    event: ChangeEvent, all_events: Sequence[ChangeEvent], context: IncidentContext
) -> ScoreFactor:
    count = count_recent_changes(event, all_events, context)
    score = frequency_score(count)
    description, evidence = narrative.describe_frequency(count)
    return ScoreFactor(
        name=CHANGE_FREQUENCY,
        score=score,
        weight=FACTOR_WEIGHTS[CHANGE_FREQUENCY],
        description=description,
        evidence=evidence,
    )


def affected_services(event: ChangeEvent, all_events: Sequence[ChangeEvent]) -> set[str]:
    """The event's service plus every service changed within the blast window."""
    window = timedelta(minutes=BLAST_WINDOW_MINUTES)
    services = {
        other.service
        for other in all_events
        if other.id != event.id and abs(other.occurred_at - event.occurred_at) <= window
    }
    services.add(event.service)
    return services


def calculate_blast_radius(event: ChangeEvent, all_events: Sequence[ChangeEvent]) -> ScoreFactor:
    size = len(affected_services(event, all_events))
    if size == 1:
        score = BLAST_SINGLE_SERVICE_SCORE
    elif size <= BLAST_FEW_SERVICES_MAX:
        score = BLAST_FEW_SERVICES_SCORE
    else:
        score = BLAST_MANY_SERVICES_SCORE

    bonuses = [key for key, _ in BLAST_META_BONUSES if event.meta.get(key)]
    score += sum(points for key, points in BLAST_META_BONUSES if key in bonuses)

    description, evidence = narrative.describe_blast_radius(size, bonuses)
    return ScoreFactor(
        name=BLAST_RADIUS,
        score=clamp(score),
        weight=FACTOR_WEIGHTS[BLAST_RADIUS],
        description=description,
        evidence=evidence,
    )
