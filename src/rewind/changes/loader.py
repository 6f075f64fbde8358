"""Load change events from JSON exports."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pydantic
import structlog

from rewind.exceptions import NotFoundError, ValidationError
from rewind.models.base import ChangeEvent

logger = structlog.get_logger()


def parse_events(payload: Any) -> list[ChangeEvent]:
    """Accept a list of event objects, or ``{"events": [...]}``."""
    if isinstance(payload, dict):
        payload = payload.get("events")
    if not isinstance(payload, list):
        raise ValidationError("Expected a list of change events or an object with 'events'")

    events: list[ChangeEvent] = []
    for index, item in enumerate(payload):
        if item is None:
            raise ValidationError(f"Change event at index {index} is null")
        try:
            events.append(ChangeEvent.model_validate(item))
        except pydantic.ValidationError as exc:
            raise ValidationError(
                f"Invalid change event at index {index}",
                extra={"errors": exc.errors(include_url=False)},
            ) from exc
    return events


def load_events(path: str | Path) -> list[ChangeEvent]:
    source = Path(path)
    try:
        payload = json.loads(source.read_text())
    except FileNotFoundError as exc:
        raise NotFoundError(f"Events file not found: {source}") from exc
    except json.JSONDecodeError as exc:
        raise ValidationError(f"Events file is not valid JSON: {exc}") from exc
    events = parse_events(payload)
    logger.info("loader.events_loaded", path=str(source), count=len(events))
    return events


def find_event(events: list[ChangeEvent], event_id: str) -> ChangeEvent:
    for event in events:
        if event.id == event_id:
            return event
    raise NotFoundError(f"Change event not found: {event_id}")
