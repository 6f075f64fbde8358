"""Operator-facing description of how scores are computed.

Built from :mod:`rewind.scoring.constants`, so the published numbers are the
numbers the scorer uses.
"""

from __future__ import annotations

from typing import Any

from rewind.models.base import EnvironmentTier, EventType, RiskLevel
from rewind.scoring import constants as c

METHODOLOGY_VERSION = "1.0.0"

_TIMING_RANGES = (
    "0-5 minutes",
    "5-15 minutes",
    "15-30 minutes",
    "30-60 minutes",
    "1-2 hours",
)
_TIMING_RISK = {
    100: "Extremely high correlation risk",
    85: "Very high correlation risk",
    70: "High correlation risk",
    50: "Moderate correlation risk",
    30: "Low correlation risk",
    10: "Minimal correlation risk",
}

_EVENT_TYPE_NOTES = {
    EventType.MIGRATION: "Database changes are high risk",
    EventType.HOTFIX: "Emergency fixes often bypass testing",
    EventType.INFRASTRUCTURE: "Infrastructure changes affect stability",
    EventType.DEPLOYMENT: "Code changes can introduce bugs",
    EventType.CONFIG_CHANGE: "Configuration changes can break systems",
    EventType.FEATURE_FLAG: "Feature toggles have moderate risk",
    EventType.SCALING: "Scaling operations can cause issues",
    EventType.ROLLBACK: "Rollbacks can introduce new problems",
    EventType.MAINTENANCE: "Maintenance typically low risk",
    EventType.OTHER: "Unrecognized change types carry moderate risk",
}

_SERVICE_LABELS = {
    "payment": ("Payment/Billing services", "Business critical"),
    "auth": ("Authentication services", "Affects all users"),
    "database": ("Database services", "Affects multiple services"),
    "api": ("API/Gateway services", "Critical for functionality"),
    "web": ("Web/Frontend services", "User-facing but lower impact"),
}

_LEVEL_NOTES = {
    RiskLevel.CRITICAL: "Immediate investigation required",
    RiskLevel.HIGH: "High priority investigation",
    RiskLevel.MEDIUM: "Should be reviewed",
    RiskLevel.LOW: "Low correlation likelihood",
}


def _pct(weight: float) -> str:
    return f"{round(weight * 100)}%"


def _timing_scoring() -> dict[str, str]:
    scoring = {
        label: f"{score} points - {_TIMING_RISK[score]}"
        for label, (_, score) in zip(_TIMING_RANGES, c.TIMING_BUCKETS, strict=True)
    }
    distant = c.TIMING_DISTANT_SCORE
    scoring["2+ hours"] = f"{distant} points - {_TIMING_RISK[distant]}"
    scoring["after incident"] = f"{c.TIMING_AFTER_INCIDENT_SCORE} points - No correlation"
    return scoring


def _service_scoring() -> dict[str, str]:
    scoring = {"Same as incident service": f"{c.SAME_SERVICE_SCORE} points - Direct correlation"}
    for group, needles, score in c.SERVICE_PATTERNS:
        label, note = _SERVICE_LABELS[group]
        scoring[label] = f"{score} points - {note} (name contains {' or '.join(needles)})"
    scoring["Other services"] = f"{c.DEFAULT_SERVICE_SCORE} points - Standard risk level"
    return scoring


def _frequency_scoring() -> dict[str, str]:
    (low_max, low), (normal_max, normal), (high_max, high) = c.FREQUENCY_BUCKETS
    return {
        f"{high_max + 1}+ changes/day": (
            f"{c.FREQUENCY_VERY_HIGH_SCORE} points - Very high frequency indicates instability"
        ),
        f"{normal_max + 1}-{high_max} changes/day": (
            f"{high} points - High frequency increases risk"
        ),
        f"{low_max + 1}-{normal_max} changes/day": f"{normal} points - Normal frequency",
        f"0-{low_max} changes/day": f"{low} points - Unusual activity may indicate risk",
    }


def _blast_scoring() -> dict[str, str]:
    bonuses = dict(c.BLAST_META_BONUSES)
    return {
        "Single service": f"{c.BLAST_SINGLE_SERVICE_SCORE} points - Isolated impact",
        f"2-{c.BLAST_FEW_SERVICES_MAX} services": (
            f"{c.BLAST_FEW_SERVICES_SCORE} points - Multiple services affected"
        ),
        f"{c.BLAST_FEW_SERVICES_MAX + 1}+ services": (
            f"{c.BLAST_MANY_SERVICES_SCORE} points - Wide-reaching impact"
        ),
        "Breaking changes": f"+{bonuses['breaking_change']} points - Compatibility issues",
        "Affects all users": f"+{bonuses['affects_all_users']} points - User-wide impact",
        "Database migration": f"+{bonuses['database_migration']} points - Data layer impact",
    }


def _level_ranges() -> dict[str, str]:
    ranges: dict[str, str] = {}
    upper = 100
    for lower, level in c.LEVEL_THRESHOLDS:
        ranges[level.value] = f"{lower}-{upper} points - {_LEVEL_NOTES[level]}"
        upper = lower - 1
    ranges[RiskLevel.LOW.value] = f"0-{upper} points - {_LEVEL_NOTES[RiskLevel.LOW]}"
    return ranges


def scoring_methodology() -> dict[str, Any]:
    """Return the versioned, JSON-serializable methodology description."""
    w = c.FACTOR_WEIGHTS
    return {
        "version": METHODOLOGY_VERSION,
        "description": (
            "Multi-factor risk assessment for change events in relation to incidents"
        ),
        "factors": [
            {
                "name": c.TIMING_PROXIMITY,
                "weight": w[c.TIMING_PROXIMITY],
                "weight_display": _pct(w[c.TIMING_PROXIMITY]),
                "description": "How close in time the change occurred to the incident",
                "scoring": _timing_scoring(),
            },
            {
                "name": c.EVENT_TYPE_RISK,
                "weight": w[c.EVENT_TYPE_RISK],
                "weight_display": _pct(w[c.EVENT_TYPE_RISK]),
                "description": "Inherent risk level of the type of change",
                "scoring": {
                    event_type.value: f"{score} points - {_EVENT_TYPE_NOTES[event_type]}"
                    for event_type, score in c.EVENT_TYPE_SCORES.items()
                },
            },
            {
                "name": c.SERVICE_CRITICALITY,
                "weight": w[c.SERVICE_CRITICALITY],
                "weight_display": _pct(w[c.SERVICE_CRITICALITY]),
                "description": "How critical the affected service is to system operation",
                "scoring": _service_scoring(),
            },
            {
                "name": c.CHANGE_FREQUENCY,
                "weight": w[c.CHANGE_FREQUENCY],
                "weight_display": _pct(w[c.CHANGE_FREQUENCY]),
                "description": (
                    f"How many changes hit this service in the "
                    f"{c.FREQUENCY_WINDOW_HOURS} hours before the incident"
                ),
                "scoring": _frequency_scoring(),
            },
            {
                "name": c.BLAST_RADIUS,
                "weight": w[c.BLAST_RADIUS],
                "weight_display": _pct(w[c.BLAST_RADIUS]),
                "description": (
                    f"Services changed within {c.BLAST_WINDOW_MINUTES} minutes of the change, "
                    "plus metadata flags"
                ),
                "scoring": _blast_scoring(),
            },
        ],
        "environment_multipliers": {
            tier.value: multiplier for tier, multiplier in c.ENVIRONMENT_MULTIPLIERS.items()
        },
        "environment_aliases": {
            EnvironmentTier.PRODUCTION.value: ["prod", "production"],
            EnvironmentTier.DEVELOPMENT.value: ["dev", "development"],
        },
        "risk_levels": _level_ranges(),
        "correlations": {
            "description": "Additional risk from multiple related changes",
            "types": [
                (
                    "Multiple deployments in sequence "
                    f"(+{c.DEPLOYMENT_CHAIN_POINTS_PER_EVENT} points each)"
                ),
                (
                    "Migration + deployment combination "
                    f"(+{c.MIGRATION_WITH_DEPLOYMENT_POINTS} points)"
                ),
                (
                    f"Changes across {c.CROSS_SERVICE_MIN_SERVICES}+ services "
                    f"(+{c.CROSS_SERVICE_POINTS_PER_SERVICE} points per service)"
                ),
            ],
        },
    }
