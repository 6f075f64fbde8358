"""Lookups from raw inputs to scoring tiers."""

from __future__ import annotations

from rewind.models.base import EnvironmentTier, RiskLevel
from rewind.scoring.constants import ENVIRONMENT_MULTIPLIERS, LEVEL_THRESHOLDS


def level_for_score(score: float) -> RiskLevel:
    for lower_bound, level in LEVEL_THRESHOLDS:
        if score >= lower_bound:
            return level
    return RiskLevel.LOW


def environment_multiplier(environment: str) -> float:
    """Case-insensitive; unrecognized environments get the ``OTHER`` multiplier."""
    return ENVIRONMENT_MULTIPLIERS[EnvironmentTier.classify(environment)]
