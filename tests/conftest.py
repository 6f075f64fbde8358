"""Shared fixtures: a fixed incident instant and a change event factory."""

from __future__ import annotations

import itertools
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest

from rewind.models.base import ChangeEvent, IncidentContext

INCIDENT_AT = datetime(2026, 1, 18, 14, 32, tzinfo=UTC)


@pytest.fixture()
def incident_at() -> datetime:
    return INCIDENT_AT


@pytest.fixture()
def context() -> IncidentContext:
    """Incident with no service, so criticality comes from name patterns."""
    return IncidentContext(incident_at=INCIDENT_AT)


@pytest.fixture()
def make_event() -> Callable[..., ChangeEvent]:
    """Factory for change events placed ``minutes_before`` the incident."""
    ids = itertools.count(1)

    def _make(
        minutes_before: float = 3,
        *,
        service: str = "orders",
        environment: str = "production",
        type: str = "deployment",
        meta: dict[str, Any] | None = None,
        id: str | None = None,
        summary: str = "",
    ) -> ChangeEvent:
        return ChangeEvent(
            id=id or f"evt-{next(ids)}",
            occurred_at=INCIDENT_AT - timedelta(minutes=minutes_before),
            service=service,
            environment=environment,
            type=type,
            source="github",
            summary=summary or f"{type} to {service}",
            meta=meta or {},
        )

    return _make
