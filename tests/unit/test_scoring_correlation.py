"""Tests for rewind.scoring.correlation -- find_event_correlations."""

from __future__ import annotations

import random

from rewind.models.base import CorrelationKind
from rewind.scoring.correlation import find_event_correlations


def _signature(correlations) -> set[tuple[str, frozenset[str], int]]:
    return {
        (c.kind.value, frozenset(e.id for e in c.events), c.risk_increase) for c in correlations
    }


class TestFindEventCorrelations:
    def test_empty(self, context):
        assert find_event_correlations([], context) == []

    def test_single_deployment_is_not_a_chain(self, make_event, context):
        assert find_event_correlations([make_event(type="deployment")], context) == []

    def test_deployment_chain(self, make_event, context):
        events = [make_event(m, type="deployment") for m in (5, 10, 15)]
        [chain] = find_event_correlations(events, context)
        assert chain.kind == CorrelationKind.DEPLOYMENT_CHAIN
        assert chain.events == events
        assert chain.risk_increase == 30
        assert chain.description == "Multiple deployments in sequence can compound issues"

    def test_migration_with_deployment(self, make_event, context):
        deploy = make_event(5, type="deployment")
        migrate = make_event(10, type="migration")
        [combo] = find_event_correlations([deploy, migrate], context)
        assert combo.kind == CorrelationKind.MIGRATION_WITH_DEPLOYMENT
        assert combo.events == [migrate, deploy]
        assert combo.risk_increase == 25

    def test_migrations_alone_do_not_correlate(self, make_event, context):
        events = [make_event(m, type="migration") for m in (5, 10)]
        assert find_event_correlations(events, context) == []

    def test_cross_service(self, make_event, context):
        events = [
            make_event(5, type="config-change", service=s)
            for s in ("api", "web", "payments", "web")
        ]
        [cross] = find_event_correlations(events, context)
        assert cross.kind == CorrelationKind.CROSS_SERVICE
        assert cross.events == events
        assert cross.risk_increase == 15

    def test_two_services_is_not_cross_service(self, make_event, context):
        events = [make_event(5, type="scaling", service=s) for s in ("api", "web")]
        assert find_event_correlations(events, context) == []

    def test_example_two_deployments_one_migration(self, make_event, context):
        events = [
            make_event(5, type="deployment", service="api"),
            make_event(6, type="deployment", service="api"),
            make_event(7, type="migration", service="db"),
        ]
        correlations = find_event_correlations(events, context)
        assert [c.kind for c in correlations] == [
            CorrelationKind.DEPLOYMENT_CHAIN,
            CorrelationKind.MIGRATION_WITH_DEPLOYMENT,
        ]
        assert [c.risk_increase for c in correlations] == [20, 25]

    def test_all_three_fire_without_dedup(self, make_event, context):
        events = [
            make_event(5, type="deployment", service="api"),
            make_event(6, type="deployment", service="web"),
            make_event(7, type="migration", service="db"),
        ]
        correlations = find_event_correlations(events, context)
        assert [c.risk_increase for c in correlations] == [20, 25, 15]
        assert len(correlations[2].events) == 3

    def test_type_match_is_exact(self, make_event, context):
        events = [make_event(5, type="Deployment"), make_event(6, type="DEPLOYMENT")]
        assert find_event_correlations(events, context) == []

    def test_miscased_migration_does_not_pair(self, make_event, context):
        events = [make_event(5, type="deployment"), make_event(6, type="Migration")]
        assert find_event_correlations(events, context) == []

    def test_order_independent(self, make_event, context):
        events = [
            make_event(m, type=t, service=s)
            for m, t, s in [
                (5, "deployment", "api"),
                (9, "migration", "orders-db"),
                (12, "deployment", "web"),
                (30, "hotfix", "payments"),
                (45, "deployment", "api"),
            ]
        ]
        expected = _signature(find_event_correlations(events, context))
        rng = random.Random(3)
        for _ in range(10):
            shuffled = events[:]
            rng.shuffle(shuffled)
            assert _signature(find_event_correlations(shuffled, context)) == expected
