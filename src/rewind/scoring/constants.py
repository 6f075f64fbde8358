"""Immutable scoring tables.

Everything the scorer and the published methodology read lives here so the
two cannot drift apart.
"""

from __future__ import annotations

from types import MappingProxyType

from rewind.models.base import EnvironmentTier, EventType, RiskLevel

TIMING_PROXIMITY = "Timing Proximity"
EVENT_TYPE_RISK = "Event Type Risk"
SERVICE_CRITICALITY = "Service Criticality"
CHANGE_FREQUENCY = "Change Frequency"
BLAST_RADIUS = "Blast Radius"

FACTOR_WEIGHTS = MappingProxyType(
    {
        TIMING_PROXIMITY: 0.30,
        EVENT_TYPE_RISK: 0.25,
        SERVICE_CRITICALITY: 0.20,
        CHANGE_FREQUENCY: 0.15,
        BLAST_RADIUS: 0.10,
    }
)

# (upper bound in minutes, score); anything beyond the last bound scores
# TIMING_DISTANT_SCORE.
TIMING_BUCKETS: tuple[tuple[int, int], ...] = (
    (5, 100),
    (15, 85),
    (30, 70),
    (60, 50),
    (120, 30),
)
TIMING_DISTANT_SCORE = 10
TIMING_AFTER_INCIDENT_SCORE = 0

EVENT_TYPE_SCORES = MappingProxyType(
    {
        EventType.MIGRATION: 85,
        EventType.HOTFIX: 80,
        EventType.INFRASTRUCTURE: 75,
        EventType.DEPLOYMENT: 70,
        EventType.CONFIG_CHANGE: 60,
        EventType.FEATURE_FLAG: 50,
        EventType.SCALING: 45,
        EventType.ROLLBACK: 40,
        EventType.MAINTENANCE: 30,
        EventType.OTHER: 50,
    }
)

SAME_SERVICE_SCORE = 90
# Checked in order; the first pattern group found in the service name wins.
SERVICE_PATTERNS: tuple[tuple[str, tuple[str, ...], int], ...] = (
    ("payment", ("payment", "billing"), 90),
    ("auth", ("auth", "login"), 85),
    ("database", ("database", "db"), 85),
    ("api", ("api", "gateway"), 80),
    ("web", ("web", "frontend"), 60),
)
DEFAULT_SERVICE_SCORE = 50

FREQUENCY_WINDOW_HOURS = 24
# (max changes in window, score); more than the last bound scores
# FREQUENCY_VERY_HIGH_SCORE. Low counts intentionally outscore normal ones.
FREQUENCY_BUCKETS: tuple[tuple[int, int], ...] = (
    (1, 30),
    (3, 20),
    (6, 40),
)
FREQUENCY_VERY_HIGH_SCORE = 70

BLAST_WINDOW_MINUTES = 10
BLAST_SINGLE_SERVICE_SCORE = 20
BLAST_FEW_SERVICES_SCORE = 50
BLAST_FEW_SERVICES_MAX = 3
BLAST_MANY_SERVICES_SCORE = 80
BLAST_META_BONUSES: tuple[tuple[str, int], ...] = (
    ("affects_all_users", 20),
    ("breaking_change", 25),
    ("database_migration", 15),
)

ENVIRONMENT_MULTIPLIERS = MappingProxyType(
    {
        EnvironmentTier.PRODUCTION: 1.0,
        EnvironmentTier.STAGING: 0.7,
        EnvironmentTier.DEVELOPMENT: 0.3,
        EnvironmentTier.TEST: 0.2,
        EnvironmentTier.OTHER: 0.5,
    }
)

# Inclusive lower bounds, evaluated in descending order.
LEVEL_THRESHOLDS: tuple[tuple[int, RiskLevel], ...] = (
    (80, RiskLevel.CRITICAL),
    (60, RiskLevel.HIGH),
    (40, RiskLevel.MEDIUM),
)

HIGH_RISK_EVENT_SCORE = 60
CRITICAL_RISK_EVENT_SCORE = 80
TIMING_RECOMMENDATION_THRESHOLD = 80
FREQUENCY_RECOMMENDATION_THRESHOLD = 60

DEPLOYMENT_CHAIN_MIN_EVENTS = 2
DEPLOYMENT_CHAIN_POINTS_PER_EVENT = 10
MIGRATION_WITH_DEPLOYMENT_POINTS = 25
CROSS_SERVICE_MIN_SERVICES = 3
CROSS_SERVICE_POINTS_PER_SERVICE = 5

AGGREGATE_TOP_FACTORS = 5
AGGREGATE_TOP_EVENTS = 3
