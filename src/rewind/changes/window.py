"""Select the change events that fall in an analysis window before an incident."""

from __future__ import annotations

import re
from collections.abc import Iterable
from datetime import UTC, datetime, timedelta

import structlog

from rewind.config import settings
from rewind.exceptions import ValidationError
from rewind.models.base import ChangeEvent

logger = structlog.get_logger()

_WINDOW_RE = re.compile(r"^(\d+)([mhd])$")
_WINDOW_UNITS = {"m": "minutes", "h": "hours", "d": "days"}


def parse_time_window(window: str) -> timedelta:
    """Parse windows like ``"30m"``, ``"2h"`` or ``"1d"``."""
    match = _WINDOW_RE.match(window)
    if match is None:
        raise ValidationError(
            f'Invalid window format "{window}". Use format like "30m", "2h", "1d" '
            "(m=minutes, h=hours, d=days)"
        )
    value, unit = match.groups()
    return timedelta(**{_WINDOW_UNITS[unit]: int(value)})


def parse_incident_at(raw: str) -> datetime:
    """Parse an ISO 8601 instant into UTC; naive values are taken as UTC."""
    if not raw:
        raise ValidationError("incidentAt is required (ISO 8601 format)")
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError as exc:
        raise ValidationError(
            f'Invalid incidentAt "{raw}". Use ISO 8601 format (e.g., 2026-01-18T14:32:00Z)'
        ) from exc
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def validate_limit(limit: int | None) -> int | None:
    """Accept 1..``settings.max_event_limit``; None means no limit."""
    if limit is None:
        return None
    max_limit = settings.max_event_limit
    if limit < 1 or limit > max_limit:
        raise ValidationError(f"Limit must be a number between 1 and {max_limit}")
    return limit


def select_events(
    events: Iterable[ChangeEvent],
    start: datetime,
    end: datetime,
    service: str | None = None,
    environment: str | None = None,
    limit: int | None = None,
) -> list[ChangeEvent]:
    """Events with ``start <= occurred_at <= end``, newest first."""
    selected = [
        e
        for e in events
        if start <= e.occurred_at <= end
        and (not service or e.service == service)
        and (not environment or e.environment == environment)
    ]
    selected.sort(key=lambda e: e.occurred_at, reverse=True)
    if limit is not None:
        selected = selected[: validate_limit(limit)]
    logger.info(
        "window.events_selected",
        start=start.isoformat(),
        end=end.isoformat(),
        service=service,
        environment=environment,
        selected=len(selected),
    )
    return selected


def events_before_incident(
    events: Iterable[ChangeEvent],
    incident_at: datetime,
    window: timedelta,
    service: str | None = None,
    environment: str | None = None,
    limit: int | None = None,
) -> list[ChangeEvent]:
    return select_events(
        events,
        incident_at - window,
        incident_at,
        service=service,
        environment=environment,
        limit=limit,
    )
