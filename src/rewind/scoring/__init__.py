"""Incident correlation and risk scoring.

Scores change events against an incident, detects risk-compounding
correlations across a batch, and aggregates both into one assessment.
"""

from rewind.scoring.correlation import find_event_correlations
from rewind.scoring.engine import score_change_event, score_multiple_events
from rewind.scoring.methodology import METHODOLOGY_VERSION, scoring_methodology

__all__ = [
    "METHODOLOGY_VERSION",
    "find_event_correlations",
    "score_change_event",
    "score_multiple_events",
    "scoring_methodology",
]
