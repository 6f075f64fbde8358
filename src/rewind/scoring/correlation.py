"""Detect patterns across a batch of change events that compound risk."""

from __future__ import annotations

from collections.abc import Sequence

import structlog

from rewind.models.base import (
    ChangeEvent,
    Correlation,
    CorrelationKind,
    EventType,
    IncidentContext,
)
from rewind.scoring.constants import (
    CROSS_SERVICE_MIN_SERVICES,
    CROSS_SERVICE_POINTS_PER_SERVICE,
    DEPLOYMENT_CHAIN_MIN_EVENTS,
    DEPLOYMENT_CHAIN_POINTS_PER_EVENT,
    MIGRATION_WITH_DEPLOYMENT_POINTS,
)
from rewind.scoring.narrative import CORRELATION_DESCRIPTIONS

logger = structlog.get_logger()


def _of_type(events: Sequence[ChangeEvent], event_type: EventType) -> list[ChangeEvent]:
    return [e for e in events if e.is_type(event_type)]


def find_event_correlations(
    events: Sequence[ChangeEvent],
    context: IncidentContext,
) -> list[Correlation]:
    """Run the three independent checks; overlapping event sets are not merged.

    ``context`` is accepted so every scoring entry point shares a signature;
    none of the current checks depend on it.
    """
    correlations: list[Correlation] = []

    deployments = _of_type(events, EventType.DEPLOYMENT)
    if len(deployments) >= DEPLOYMENT_CHAIN_MIN_EVENTS:
        correlations.append(
            Correlation(
                kind=CorrelationKind.DEPLOYMENT_CHAIN,
                events=deployments,
                description=CORRELATION_DESCRIPTIONS[CorrelationKind.DEPLOYMENT_CHAIN],
                risk_increase=len(deployments) * DEPLOYMENT_CHAIN_POINTS_PER_EVENT,
            )
        )

    migrations = _of_type(events, EventType.MIGRATION)
    if migrations and deployments:
        correlations.append(
            Correlation(
                kind=CorrelationKind.MIGRATION_WITH_DEPLOYMENT,
                events=[*migrations, *deployments],
                description=CORRELATION_DESCRIPTIONS[CorrelationKind.MIGRATION_WITH_DEPLOYMENT],
                risk_increase=MIGRATION_WITH_DEPLOYMENT_POINTS,
            )
        )

    services = {e.service for e in events}
    if len(services) >= CROSS_SERVICE_MIN_SERVICES:
        correlations.append(
            Correlation(
                kind=CorrelationKind.CROSS_SERVICE,
                events=list(events),
                description=CORRELATION_DESCRIPTIONS[CorrelationKind.CROSS_SERVICE],
                risk_increase=len(services) * CROSS_SERVICE_POINTS_PER_SERVICE,
            )
        )

    for correlation in correlations:
        logger.debug(
            "correlation.detected",
            kind=correlation.kind.value,
            event_count=len(correlation.events),
            risk_increase=correlation.risk_increase,
        )
    return correlations
