"""Tests for rewind.scoring.engine -- single-event and batch scoring."""

from __future__ import annotations

import random

import pytest

from rewind.models.base import IncidentContext, RiskLevel
from rewind.scoring.constants import FACTOR_WEIGHTS
from rewind.scoring.engine import calculate_factors, score_change_event, score_multiple_events
from rewind.scoring.levels import environment_multiplier, level_for_score
from rewind.scoring.numeric import clamp, round_half_up

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class TestNumeric:
    @pytest.mark.parametrize(
        ("value", "expected"), [(75.75, 76), (68.5, 69), (62.5, 63), (0.49, 0), (99.5, 100)]
    )
    def test_round_half_up(self, value, expected):
        assert round_half_up(value) == expected

    def test_clamp(self):
        assert clamp(-3) == 0
        assert clamp(140) == 100
        assert clamp(42.5) == 42.5


class TestLevels:
    @pytest.mark.parametrize(
        ("score", "level"),
        [
            (100, RiskLevel.CRITICAL),
            (80, RiskLevel.CRITICAL),
            (79, RiskLevel.HIGH),
            (60, RiskLevel.HIGH),
            (59, RiskLevel.MEDIUM),
            (40, RiskLevel.MEDIUM),
            (39, RiskLevel.LOW),
            (0, RiskLevel.LOW),
        ],
    )
    def test_breakpoints(self, score, level):
        assert level_for_score(score) == level

    def test_monotonic(self):
        order = [RiskLevel.LOW, RiskLevel.MEDIUM, RiskLevel.HIGH, RiskLevel.CRITICAL]
        ranks = [order.index(level_for_score(s)) for s in range(101)]
        assert ranks == sorted(ranks)

    @pytest.mark.parametrize(
        ("environment", "multiplier"),
        [
            ("prod", 1.0),
            ("production", 1.0),
            ("PROD", 1.0),
            ("staging", 0.7),
            ("dev", 0.3),
            ("development", 0.3),
            ("test", 0.2),
            ("sandbox", 0.5),
        ],
    )
    def test_environment_multiplier(self, environment, multiplier):
        assert environment_multiplier(environment) == multiplier


# ---------------------------------------------------------------------------
# Single event
# ---------------------------------------------------------------------------


class TestScoreChangeEvent:
    def test_weights_sum_to_one(self):
        assert sum(FACTOR_WEIGHTS.values()) == pytest.approx(1.0)

    def test_factor_order_and_weights(self, make_event, context):
        event = make_event()
        factors = calculate_factors(event, context, [event])
        assert [f.name for f in factors] == [
            "Timing Proximity",
            "Event Type Risk",
            "Service Criticality",
            "Change Frequency",
            "Blast Radius",
        ]
        assert [f.weight for f in factors] == [0.30, 0.25, 0.20, 0.15, 0.10]

    def test_worked_example_migration_on_database(self, make_event, incident_at):
        event = make_event(3, type="migration", service="database", environment="prod")
        ctx = IncidentContext(incident_at=incident_at, service="database")
        result = score_change_event(event, ctx, [event])

        assert [f.score for f in result.factors] == [100, 85, 90, 30, 20]
        assert sum(f.contribution for f in result.factors) == pytest.approx(75.75)
        assert result.score == 76
        assert result.level == RiskLevel.HIGH
        assert "high risk score of 76/100" in result.explanation
        assert "primary risk factor is timing proximity" in result.explanation
        assert result.recommendations == [
            "Immediately investigate this change as a primary suspect",
            "Check if rollback is possible and safe",
            "Review change approval and testing processes",
            "Verify exact timing correlation with incident onset",
            "Check database performance and integrity",
            "Review migration logs for errors",
        ]

    def test_environment_scales_score(self, make_event, incident_at):
        ctx = IncidentContext(incident_at=incident_at, service="database")
        prod = make_event(3, type="migration", service="database", environment="prod")
        staging = make_event(3, type="migration", service="database", environment="staging")
        result = score_change_event(staging, ctx, [staging])
        # 75.75 * 0.7 = 53.025
        assert result.score == 53
        assert result.level == RiskLevel.MEDIUM
        assert score_change_event(prod, ctx, [prod]).score == 76

    def test_unknown_environment_uses_half(self, make_event, incident_at):
        ctx = IncidentContext(incident_at=incident_at, service="database")
        event = make_event(3, type="migration", service="database", environment="qa-east")
        # 75.75 * 0.5 = 37.875
        result = score_change_event(event, ctx, [event])
        assert result.score == 38
        assert result.level == RiskLevel.LOW
        assert "unlikely to be the primary cause" in result.explanation

    def test_event_after_incident_scores_low(self, make_event, context):
        event = make_event(-30, type="maintenance", service="inventory", environment="test")
        result = score_change_event(event, context, [event])
        assert result.factors[0].score == 0
        assert result.level == RiskLevel.LOW
        assert 0 <= result.score <= 100

    def test_author_recommendation(self, make_event, context):
        event = make_event(200, type="maintenance", meta={"author": "bob"})
        result = score_change_event(event, context, [event])
        assert result.recommendations[-1] == "Contact change author: bob"

    def test_without_batch(self, make_event, context):
        result = score_change_event(make_event(3), context)
        assert result.factors[3].score == 30
        assert result.factors[4].score == 20

    def test_deterministic(self, make_event, context):
        events = [make_event(m, service=s) for m, s in ((3, "api"), (8, "db"), (40, "web"))]
        first = score_change_event(events[0], context, events)
        second = score_change_event(events[0], context, events)
        assert first == second

    def test_score_always_in_range(self, make_event, context):
        rng = random.Random(7)
        types = ["migration", "hotfix", "deployment", "scaling", "odd-type"]
        services = ["payments", "auth", "orders-db", "api", "web", "misc"]
        envs = ["prod", "staging", "dev", "test", "other"]
        flags = {"breaking_change": True, "affects_all_users": True, "database_migration": True}
        events = [
            make_event(
                rng.uniform(-60, 60 * 30),
                type=rng.choice(types),
                service=rng.choice(services),
                environment=rng.choice(envs),
                meta=flags if rng.random() < 0.3 else {},
            )
            for _ in range(40)
        ]
        for event in events:
            result = score_change_event(event, context, events)
            assert 0 <= result.score <= 100
            assert result.level == level_for_score(result.score)
            assert all(0 <= f.score <= 100 for f in result.factors)
            assert sum(f.contribution for f in result.factors) <= 100


# ---------------------------------------------------------------------------
# Batch
# ---------------------------------------------------------------------------


class TestScoreMultipleEvents:
    def test_empty_batch(self, context):
        assessment = score_multiple_events([], context)
        overall = assessment.overall_score
        assert overall.score == 0
        assert overall.level == RiskLevel.LOW
        assert overall.explanation.startswith("No change events found")
        assert overall.factors == []
        assert len(overall.recommendations) == 1
        assert assessment.individual_scores == []
        assert assessment.correlations == []

    def test_individual_scores_use_full_batch(self, make_event, context):
        events = [make_event(m, service="orders") for m in (5, 20, 40, 60)]
        assessment = score_multiple_events(events, context)
        assert [item.event.id for item in assessment.individual_scores] == [e.id for e in events]
        for item in assessment.individual_scores:
            assert item.score == score_change_event(item.event, context, events)
            assert item.score.factors[3].score == 40

    def test_thread_pool_matches_sequential(self, make_event, context):
        rng = random.Random(11)
        events = [
            make_event(
                rng.uniform(0, 600),
                service=rng.choice(["api", "payments", "web", "orders-db"]),
                type=rng.choice(["deployment", "migration", "config-change"]),
            )
            for _ in range(25)
        ]
        sequential = score_multiple_events(events, context)
        parallel = score_multiple_events(events, context, max_workers=4)
        assert parallel == sequential

    def test_two_deployments_and_a_migration(self, make_event, context):
        e1 = make_event(5, type="deployment", service="api-gateway")
        e2 = make_event(8, type="deployment", service="api-gateway")
        e3 = make_event(20, type="migration", service="orders-db")
        assessment = score_multiple_events([e1, e2, e3], context)

        scores = [item.score.score for item in assessment.individual_scores]
        assert scores == [69, 64, 66]
        assert [c.risk_increase for c in assessment.correlations] == [20, 25]

        overall = assessment.overall_score
        assert overall.score == 100
        assert overall.level == RiskLevel.CRITICAL
        assert "Analyzed 3 change events." in overall.explanation
        assert "3 high-risk changes identified." in overall.explanation
        assert "Found 2 risk-amplifying correlations" in overall.explanation
        assert overall.recommendations == [
            "URGENT: Multiple high-risk changes detected - coordinate immediate investigation",
            "Consider emergency rollback procedures",
            "1. Investigate deployment to api-gateway (score: 69)",
            "2. Investigate migration to orders-db (score: 66)",
            "3. Investigate deployment to api-gateway (score: 64)",
            "Analyze change correlations and dependencies",
        ]
        assert [f.score for f in overall.factors] == [100, 85, 85, 70, 70]
        assert [f.name for f in overall.factors] == [
            "Timing Proximity",
            "Timing Proximity",
            "Event Type Risk",
            "Timing Proximity",
            "Event Type Risk",
        ]

    def test_individual_order_is_not_mutated(self, make_event, context):
        low = make_event(500, type="maintenance", service="misc")
        high = make_event(2, type="hotfix", service="payments")
        assessment = score_multiple_events([low, high], context)
        assert [item.event.id for item in assessment.individual_scores] == [low.id, high.id]
        assert assessment.overall_score.recommendations[0].startswith("1. Investigate hotfix")
