"""Unit tests for hazardfusion.alerts.factory and hazardfusion.alerts.recommendations.

Covers:
- alert_summary: wording and hazard-name formatting
- AlertFactory.create: identity, region bounds, escalation reason, related reports
- generate_recommendations: lookup, hazard/severity fallbacks, returned copy
"""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from config.settings import FusionConfig
from hazardfusion.alerts.factory import AlertFactory, alert_summary
from hazardfusion.alerts.recommendations import RECOMMENDATIONS, generate_recommendations
from hazardfusion.models.fusion import ReportCluster

_NOW = datetime(2024, 1, 15, 15, 30, tzinfo=timezone.utc)


@pytest.fixture
def surge_cluster(make_report):
    reports = [
        make_report("r-1", minutes=0, source="citizen", hazard="storm_surge", region="Bay Area"),
        make_report("r-2", minutes=60, source="social", hazard="storm_surge", region="Bay Area"),
        make_report("r-3", minutes=180, source="citizen", hazard="storm_surge", region="Bay Area"),
    ]
    return ReportCluster(
        id="cluster-1",
        reports=reports,
        centroid=(37.80, -122.40),
        hazard_type="storm_surge",
        region="Bay Area",
        severity="high",
        confidence=84.37,
        start_time=reports[0].timestamp,
        end_time=reports[-1].timestamp,
    )


@pytest.fixture
def factory():
    return AlertFactory(FusionConfig(), clock=lambda: _NOW, id_factory=lambda: "alert-1")


# ── alert_summary ─────────────────────────────────────────────────────────────────

class TestAlertSummary:
    def test_summary_wording(self, surge_cluster):
        assert alert_summary(surge_cluster) == "High storm surge alert: 3 reports in Bay Area"


# ── AlertFactory.create ───────────────────────────────────────────────────────────

class TestAlertFactoryCreate:
    def test_identity_and_copied_fields(self, factory, surge_cluster):
        alert = factory.create(surge_cluster)

        assert alert.id == "alert-1"
        assert alert.timestamp == _NOW
        assert alert.status == "active"
        assert alert.hazard_type == "storm_surge"
        assert alert.severity == "high"
        assert alert.confidence == 84.37
        assert alert.related_reports == ["r-1", "r-2", "r-3"]
        assert alert.ai_summary == "High storm surge alert: 3 reports in Bay Area"

    def test_region_bounds_are_closed_square(self, factory, surge_cluster):
        alert = factory.create(surge_cluster)
        ring = alert.region.bounds.coordinates[0]

        assert alert.region.name == "Bay Area"
        assert alert.region.bounds.type == "Polygon"
        assert alert.region.affected_population == 0
        assert len(ring) == 5
        assert ring[0] == ring[-1]
        assert ring[0] == pytest.approx([-122.50, 37.70])
        assert ring[2] == pytest.approx([-122.30, 37.90])

    def test_escalation_reason(self, factory, surge_cluster):
        reason = factory.create(surge_cluster).escalation_reason

        assert reason.report_count == 3
        assert reason.source_types == ["citizen", "social"]
        assert reason.time_window == "3 hours"
        assert reason.geographic_spread == 10.0
        assert reason.thresholds_met == ["minimum_reports", "confidence_threshold"]
        assert reason.reasoning == "Clustered 3 reports within 10 km radius"

    def test_configured_radius_and_bbox(self, surge_cluster):
        config = FusionConfig(spatial_radius_km=2.5, bbox_half_size_deg=0.05)
        alert = AlertFactory(config, clock=lambda: _NOW).create(surge_cluster)

        assert alert.escalation_reason.reasoning == "Clustered 3 reports within 2.5 km radius"
        assert alert.region.bounds.coordinates[0][0] == pytest.approx([-122.45, 37.75])

    def test_default_ids_are_unique(self, surge_cluster):
        factory = AlertFactory()
        assert factory.create(surge_cluster).id != factory.create(surge_cluster).id


# ── generate_recommendations ──────────────────────────────────────────────────────

class TestGenerateRecommendations:
    def test_lookup_preserves_order(self):
        assert generate_recommendations("flooding", "high") == [
            "Evacuate low-lying areas immediately",
            "Move to higher ground",
            "Avoid walking or driving through flood waters",
            "Contact emergency services if trapped",
        ]

    def test_every_hazard_has_every_severity(self):
        for hazard, by_severity in RECOMMENDATIONS.items():
            assert set(by_severity) == {"low", "moderate", "high"}, hazard

    def test_unknown_hazard_uses_generic_advice(self):
        assert generate_recommendations("volcano", "high") == RECOMMENDATIONS["other"]["high"]

    def test_unknown_severity_uses_moderate_advice(self):
        assert generate_recommendations("tsunami", "extreme") == RECOMMENDATIONS["tsunami"]["moderate"]

    def test_returns_copy(self):
        recs = generate_recommendations("erosion", "low")
        recs.append("mutated")
        assert "mutated" not in RECOMMENDATIONS["erosion"]["low"]
