"""Tests for rewind.scoring.methodology -- the published scoring description."""

from __future__ import annotations

import json

import pytest

from rewind.scoring.methodology import METHODOLOGY_VERSION, scoring_methodology


@pytest.fixture()
def payload():
    return scoring_methodology()


class TestMethodology:
    def test_versioned(self, payload):
        assert payload["version"] == METHODOLOGY_VERSION

    def test_json_serializable(self, payload):
        assert json.loads(json.dumps(payload)) == payload

    def test_factor_weights(self, payload):
        weights = {f["name"]: f["weight"] for f in payload["factors"]}
        assert weights == {
            "Timing Proximity": 0.30,
            "Event Type Risk": 0.25,
            "Service Criticality": 0.20,
            "Change Frequency": 0.15,
            "Blast Radius": 0.10,
        }
        assert [f["weight_display"] for f in payload["factors"]] == [
            "30%",
            "25%",
            "20%",
            "15%",
            "10%",
        ]

    def test_timing_buckets(self, payload):
        timing = payload["factors"][0]["scoring"]
        assert timing["0-5 minutes"].startswith("100 points")
        assert timing["1-2 hours"].startswith("30 points")
        assert timing["2+ hours"].startswith("10 points")

    def test_event_type_table(self, payload):
        types = payload["factors"][1]["scoring"]
        assert types["migration"].startswith("85 points")
        assert types["maintenance"].startswith("30 points")
        assert types["other"].startswith("50 points")

    def test_service_table(self, payload):
        service = payload["factors"][2]["scoring"]
        assert list(service)[0] == "Same as incident service"
        assert service["Payment/Billing services"].startswith("90 points")
        assert service["Other services"].startswith("50 points")

    def test_frequency_table(self, payload):
        frequency = payload["factors"][3]["scoring"]
        assert frequency == {
            "7+ changes/day": "70 points - Very high frequency indicates instability",
            "4-6 changes/day": "40 points - High frequency increases risk",
            "2-3 changes/day": "20 points - Normal frequency",
            "0-1 changes/day": "30 points - Unusual activity may indicate risk",
        }

    def test_blast_table(self, payload):
        blast = payload["factors"][4]["scoring"]
        assert blast["4+ services"].startswith("80 points")
        assert blast["Breaking changes"].startswith("+25")

    def test_environment_multipliers(self, payload):
        assert payload["environment_multipliers"] == {
            "production": 1.0,
            "staging": 0.7,
            "development": 0.3,
            "test": 0.2,
            "other": 0.5,
        }

    def test_risk_levels(self, payload):
        levels = payload["risk_levels"]
        assert levels["critical"].startswith("80-100 points")
        assert levels["high"].startswith("60-79 points")
        assert levels["medium"].startswith("40-59 points")
        assert levels["low"].startswith("0-39 points")

    def test_correlations(self, payload):
        assert len(payload["correlations"]["types"]) == 3
