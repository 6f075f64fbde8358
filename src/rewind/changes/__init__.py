"""Change event selection, loading and the rewind timeline."""

from rewind.changes.loader import find_event, load_events, parse_events
from rewind.changes.rewind import build_timeline, quick_assessment, summarize
from rewind.changes.window import (
    events_before_incident,
    parse_incident_at,
    parse_time_window,
    select_events,
)

__all__ = [
    "build_timeline",
    "events_before_incident",
    "find_event",
    "load_events",
    "parse_events",
    "parse_incident_at",
    "parse_time_window",
    "quick_assessment",
    "select_events",
    "summarize",
]
