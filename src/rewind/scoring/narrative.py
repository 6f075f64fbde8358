"""Human-readable text for factors, explanations and recommendations.

Nothing here computes a score. Every function takes values the scorer has
already measured and renders them, so wording can change and be tested
without touching the math.
"""

from __future__ import annotations

from collections.abc import Sequence

from rewind.models.base import (
    ChangeEvent,
    CorrelationKind,
    EventType,
    RiskLevel,
    ScoredEvent,
    ScoreFactor,
)
from rewind.scoring.constants import (
    BLAST_FEW_SERVICES_MAX,
    BLAST_WINDOW_MINUTES,
    CHANGE_FREQUENCY,
    EVENT_TYPE_RISK,
    FREQUENCY_BUCKETS,
    FREQUENCY_RECOMMENDATION_THRESHOLD,
    FREQUENCY_WINDOW_HOURS,
    TIMING_PROXIMITY,
    TIMING_RECOMMENDATION_THRESHOLD,
)
from rewind.scoring.numeric import round_half_up

# -- Factor narratives ---------------------------------------------------------

_TIMING_LABELS: dict[int, tuple[str, str]] = {
    100: ("Extremely close timing", "very high correlation risk"),
    85: ("Very close timing", "high correlation risk"),
    70: ("Close timing", "moderate correlation risk"),
    50: ("Recent timing", "some correlation risk"),
    30: ("Moderately recent", "low correlation risk"),
    10: ("Distant timing", "minimal correlation risk"),
}

_HOURS_AFTER_MINUTES = 120


def timing_label(score: int) -> str:
    return _TIMING_LABELS[score][0]


def describe_timing(minutes_diff: float, score: int) -> tuple[str, list[str]]:
    """Describe how long before the incident a change happened."""
    if minutes_diff < 0:
        return "Event occurred after incident", ["Change happened after the incident occurred"]

    label, risk = _TIMING_LABELS[score]
    if minutes_diff > _HOURS_AFTER_MINUTES:
        elapsed = f"Change occurred {round_half_up(minutes_diff / 60)} hours before incident"
    elif minutes_diff <= 5:
        elapsed = f"Change occurred only {round_half_up(minutes_diff)} minutes before incident"
    else:
        elapsed = f"Change occurred {round_half_up(minutes_diff)} minutes before incident"
    return f"{label} - {risk}", [elapsed, label]


def describe_event_type(event: ChangeEvent, event_type: EventType) -> tuple[str, list[str]]:
    if event_type == EventType.DEPLOYMENT:
        evidence = ["New code deployment"]
        if event.meta.get("rollback_available") is False:
            evidence.append("No rollback mechanism available")
        return "Code deployments can introduce bugs or breaking changes", evidence
    if event_type == EventType.MIGRATION:
        return "Database migrations are high-risk operations", [
            "Database schema or data changes",
            "Potential for data corruption or performance issues",
        ]
    if event_type == EventType.HOTFIX:
        return "Hotfixes are rushed changes with higher error probability", [
            "Emergency fix deployed",
            "Likely bypassed normal testing procedures",
        ]
    if event_type == EventType.INFRASTRUCTURE:
        return "Infrastructure changes can affect system stability", [
            "Infrastructure or configuration changes",
        ]
    if event_type == EventType.ROLLBACK:
        return "Rollbacks indicate previous issues and can cause new problems", [
            "Rollback operation performed",
        ]
    return f"{event.type} changes carry moderate risk", [f"{event.type} operation performed"]


_SERVICE_NARRATIVE: dict[str | None, tuple[str, str]] = {
    "payment": ("Change to payment/billing service", "Payment services are business-critical"),
    "auth": ("Change to authentication service", "Authentication services affect all user access"),
    "database": (
        "Change to database service",
        "Database changes can affect multiple dependent services",
    ),
    "api": (
        "Change to critical API service",
        "API services are typically critical for system functionality",
    ),
    "web": (
        "Change to web/frontend service",
        "Frontend changes typically have lower system impact",
    ),
    None: ("Change to standard service", "Service criticality not determined from name"),
}


def describe_service(
    service: str, *, same_as_incident: bool, group: str | None
) -> tuple[str, list[str]]:
    """``group`` is the matched pattern group name, or None for no match."""
    if same_as_incident:
        return (
            "Change to the same service experiencing the incident (direct correlation)",
            [f"Direct change to affected service: {service}"],
        )
    description, evidence = _SERVICE_NARRATIVE[group]
    return description, [evidence]


def describe_frequency(count: int) -> tuple[str, list[str]]:
    (low_max, _), (normal_max, _), (high_max, _) = FREQUENCY_BUCKETS
    if count <= low_max:
        return "Infrequent changes - unusual activity", [
            "Very few recent changes to this service",
            "Unusual change activity may indicate higher risk",
        ]
    in_window = f"{count} changes in past {FREQUENCY_WINDOW_HOURS} hours"
    if count <= normal_max:
        return "Normal change frequency", [in_window]
    if count <= high_max:
        return "High change frequency - increased risk", [
            in_window,
            "High change frequency increases chance of issues",
        ]
    return "Very high change frequency - significant risk", [
        in_window,
        "Extremely high change rate indicates instability",
    ]


_BONUS_EVIDENCE: dict[str, str] = {
    "affects_all_users": "Change affects all users",
    "breaking_change": "Breaking change detected",
    "database_migration": "Database migration affects data layer",
}


def describe_blast_radius(
    affected_services: int, bonuses: Sequence[str]
) -> tuple[str, list[str]]:
    if affected_services == 1:
        description = "Single service affected"
        evidence = ["Change isolated to one service"]
    elif affected_services <= BLAST_FEW_SERVICES_MAX:
        description = "Multiple services affected"
        evidence = [
            f"{affected_services} services changed within {BLAST_WINDOW_MINUTES} minutes"
        ]
    else:
        description = "Wide-reaching changes across many services"
        evidence = [
            f"{affected_services} services changed simultaneously",
            "Coordinated changes increase system-wide risk",
        ]
    evidence.extend(_BONUS_EVIDENCE[key] for key in bonuses)
    return description, evidence


# -- Single event --------------------------------------------------------------


def primary_factor(factors: Sequence[ScoreFactor]) -> ScoreFactor:
    """Factor with the largest weighted contribution; the earliest wins ties."""
    top = factors[0]
    for factor in factors[1:]:
        if factor.contribution > top.contribution:
            top = factor
    return top


_CLOSING: dict[RiskLevel, str] = {
    RiskLevel.CRITICAL: (
        "This change should be investigated as a potential root cause of the incident."
    ),
    RiskLevel.HIGH: (
        "This change should be investigated as a potential root cause of the incident."
    ),
    RiskLevel.MEDIUM: "This change may have contributed to the incident and should be reviewed.",
    RiskLevel.LOW: (
        "This change is unlikely to be the primary cause but may be a contributing factor."
    ),
}


def explain_event(
    event: ChangeEvent, score: int, level: RiskLevel, factors: Sequence[ScoreFactor]
) -> str:
    top = primary_factor(factors)
    return (
        f"This {event.type} to {event.service} has a {level.value} risk score of {score}/100. "
        f"The primary risk factor is {top.name.lower()}: {top.description}. "
        f"{_CLOSING[level]}"
    )


def recommend_for_event(
    event: ChangeEvent, level: RiskLevel, factors: Sequence[ScoreFactor]
) -> list[str]:
    recommendations: list[str] = []
    if level in (RiskLevel.CRITICAL, RiskLevel.HIGH):
        recommendations.extend(
            [
                "Immediately investigate this change as a primary suspect",
                "Check if rollback is possible and safe",
                "Review change approval and testing processes",
            ]
        )

    is_migration = event.is_type(EventType.MIGRATION)
    for factor in factors:
        if factor.name == TIMING_PROXIMITY and factor.score >= TIMING_RECOMMENDATION_THRESHOLD:
            recommendations.append("Verify exact timing correlation with incident onset")
        if factor.name == EVENT_TYPE_RISK and is_migration:
            recommendations.append("Check database performance and integrity")
            recommendations.append("Review migration logs for errors")
        if factor.name == CHANGE_FREQUENCY and factor.score >= FREQUENCY_RECOMMENDATION_THRESHOLD:
            recommendations.append("Implement change freezes during high-frequency periods")

    author = event.meta.get("author")
    if author:
        recommendations.append(f"Contact change author: {author}")
    return recommendations


# -- Batch ---------------------------------------------------------------------

EMPTY_BATCH_EXPLANATION = "No change events found in the specified time window."
EMPTY_BATCH_RECOMMENDATION = "No recent changes detected - investigate other potential causes"

CORRELATION_DESCRIPTIONS: dict[CorrelationKind, str] = {
    CorrelationKind.DEPLOYMENT_CHAIN: "Multiple deployments in sequence can compound issues",
    CorrelationKind.MIGRATION_WITH_DEPLOYMENT: (
        "Database migrations combined with deployments are high-risk"
    ),
    CorrelationKind.CROSS_SERVICE: "Changes across multiple services increase system complexity",
}


def explain_batch(
    score: int,
    level: RiskLevel,
    events_analyzed: int,
    high_risk_events: int,
    correlations_found: int,
) -> str:
    return (
        f"Overall risk assessment: {level.value} ({score}/100). "
        f"Analyzed {events_analyzed} change events. "
        f"{high_risk_events} high-risk changes identified. "
        f"Found {correlations_found} risk-amplifying correlations between changes."
    )


def recommend_for_batch(
    level: RiskLevel, top_events: Sequence[ScoredEvent], has_correlations: bool
) -> list[str]:
    recommendations: list[str] = []
    if level == RiskLevel.CRITICAL:
        recommendations.append(
            "URGENT: Multiple high-risk changes detected - coordinate immediate investigation"
        )
        recommendations.append("Consider emergency rollback procedures")
    elif level == RiskLevel.HIGH:
        recommendations.append("Prioritize investigation of identified high-risk changes")
        recommendations.append("Prepare rollback plans for recent changes")

    for index, item in enumerate(top_events, start=1):
        recommendations.append(
            f"{index}. Investigate {item.event.type} to {item.event.service} "
            f"(score: {item.score.score})"
        )

    if has_correlations:
        recommendations.append("Analyze change correlations and dependencies")
    return recommendations
