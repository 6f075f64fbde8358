"""Combine per-event scores and correlations into one incident assessment."""

from __future__ import annotations

from collections.abc import Sequence

from rewind.models.base import Correlation, RiskLevel, ScoredEvent, ScoreFactor, ScoreResult
from rewind.scoring import narrative
from rewind.scoring.constants import (
    AGGREGATE_TOP_EVENTS,
    AGGREGATE_TOP_FACTORS,
    HIGH_RISK_EVENT_SCORE,
)
from rewind.scoring.levels import level_for_score
from rewind.scoring.numeric import clamp, round_half_up


def empty_assessment() -> ScoreResult:
    return ScoreResult(
        score=0,
        level=RiskLevel.LOW,
        explanation=narrative.EMPTY_BATCH_EXPLANATION,
        factors=[],
        recommendations=[narrative.EMPTY_BATCH_RECOMMENDATION],
    )


def top_factors(
    individual_scores: Sequence[ScoredEvent], limit: int = AGGREGATE_TOP_FACTORS
) -> list[ScoreFactor]:
    """Highest weighted contributions across all events; ties keep input order."""
    flattened = [factor for item in individual_scores for factor in item.score.factors]
    return sorted(flattened, key=lambda f: f.contribution, reverse=True)[:limit]


def top_events(
    individual_scores: Sequence[ScoredEvent], limit: int = AGGREGATE_TOP_EVENTS
) -> list[ScoredEvent]:
    return sorted(individual_scores, key=lambda item: item.score.score, reverse=True)[:limit]


def calculate_overall_risk(
    individual_scores: Sequence[ScoredEvent],
    correlations: Sequence[Correlation],
) -> ScoreResult:
    if not individual_scores:
        return empty_assessment()

    avg_score = sum(item.score.score for item in individual_scores) / len(individual_scores)
    correlation_risk = sum(c.risk_increase for c in correlations)
    score = round_half_up(clamp(avg_score + correlation_risk))
    level = level_for_score(score)
    high_risk = sum(1 for item in individual_scores if item.score.score >= HIGH_RISK_EVENT_SCORE)

    return ScoreResult(
        score=score,
        level=level,
        explanation=narrative.explain_batch(
            score, level, len(individual_scores), high_risk, len(correlations)
        ),
        factors=top_factors(individual_scores),
        recommendations=narrative.recommend_for_batch(
            level, top_events(individual_scores), bool(correlations)
        ),
    )
