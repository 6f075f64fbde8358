"""Incident risk scoring engine.

Scores change events against an incident with five weighted factors and an
environment multiplier, then combines a batch of scores with detected
correlations into an overall assessment. All functions are pure; nothing is
cached between calls.
"""

from __future__ import annotations

from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor

import structlog

from rewind.models.base import (
    BatchAssessment,
    ChangeEvent,
    IncidentContext,
    ScoredEvent,
    ScoreFactor,
    ScoreResult,
)
from rewind.scoring import narrative
from rewind.scoring.aggregate import calculate_overall_risk
from rewind.scoring.correlation import find_event_correlations
from rewind.scoring.factors import (
    calculate_blast_radius,
    calculate_change_frequency,
    calculate_event_type_risk,
    calculate_service_criticality,
    calculate_timing_proximity,
)
from rewind.scoring.levels import environment_multiplier, level_for_score
from rewind.scoring.numeric import clamp, round_half_up

logger = structlog.get_logger()


def calculate_factors(
    event: ChangeEvent,
    context: IncidentContext,
    all_events: Sequence[ChangeEvent] = (),
) -> list[ScoreFactor]:
    """The five factors, always in the same order."""
    return [
        calculate_timing_proximity(event, context),
        calculate_event_type_risk(event),
        calculate_service_criticality(event, context),
        calculate_change_frequency(event, all_events, context),
        calculate_blast_radius(event, all_events),
    ]


def score_change_event(
    event: ChangeEvent,
    context: IncidentContext,
    all_events: Sequence[ChangeEvent] = (),
) -> ScoreResult:
    """Score one change event as a suspect for the incident in ``context``.

    ``all_events`` is the batch the event was selected from; it feeds the
    change frequency and blast radius factors.
    """
    factors = calculate_factors(event, context, all_events)
    weighted = sum(f.contribution for f in factors)
    multiplier = environment_multiplier(event.environment)
    score = round_half_up(clamp(weighted * multiplier))
    level = level_for_score(score)

    logger.debug(
        "scoring.event_scored",
        event_id=event.id,
        service=event.service,
        weighted=round(weighted, 2),
        multiplier=multiplier,
        score=score,
        level=level.value,
    )
    return ScoreResult(
        score=score,
        level=level,
        explanation=narrative.explain_event(event, score, level, factors),
        factors=factors,
        recommendations=narrative.recommend_for_event(event, level, factors),
    )


def score_multiple_events(
    events: Sequence[ChangeEvent],
    context: IncidentContext,
    max_workers: int | None = None,
) -> BatchAssessment:
    """Score every event against the full batch and assess the incident overall.

    With ``max_workers`` above 1 the per-event scoring runs on a thread pool;
    results keep input order and match a sequential run exactly.
    """
    batch = list(events)

    def _score(event: ChangeEvent) -> ScoredEvent:
        return ScoredEvent(event=event, score=score_change_event(event, context, batch))

    if max_workers and max_workers > 1 and len(batch) > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            individual_scores = list(pool.map(_score, batch))
    else:
        individual_scores = [_score(event) for event in batch]

    correlations = find_event_correlations(batch, context)
    overall = calculate_overall_risk(individual_scores, correlations)

    logger.debug(
        "scoring.batch_scored",
        event_count=len(batch),
        correlation_count=len(correlations),
        score=overall.score,
        level=overall.level.value,
    )
    return BatchAssessment(
        overall_score=overall,
        individual_scores=individual_scores,
        correlations=correlations,
    )
