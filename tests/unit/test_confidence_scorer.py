"""Unit tests for hazardfusion.analysis.confidence_scorer.

Covers:
- Individual factor functions: tables, bounds, neutral values
- ConfidenceScorer.score: empty input, rounding, breakdown text, custom weights
- Corroboration: adding a new source type never lowers the overall score
- determine_severity: explicit high rule, majority vote, tie-breaks, bands
- calculate_alert_priority / rank_alerts
"""

from __future__ import annotations

import math
from datetime import timedelta

import pytest

from config.settings import FusionConfig, ScoringWeights
from hazardfusion.analysis.confidence_scorer import (
    ConfidenceScorer,
    ai_confidence_score,
    calculate_alert_priority,
    calculate_confidence_score,
    media_evidence_score,
    rank_alerts,
    source_count_score,
    source_diversity_score,
    spatial_consistency_score,
    temporal_consistency_score,
)
from hazardfusion.models.reports import Severity

_RELIABILITY = {"citizen": 0.6, "social": 0.5, "official": 1.0}


# ── source_count_score ───────────────────────────────────────────────────────────

class TestSourceCountScore:
    @pytest.mark.parametrize(
        "count, expected",
        [(0, 0.0), (1, 30.0), (2, 50.0), (3, 65.0), (5, 75.0), (6, 77.0), (10, 85.0)],
    )
    def test_table_values(self, count, expected):
        assert source_count_score(count) == pytest.approx(expected)

    def test_logarithmic_tail(self):
        """Above ten reports the score grows logarithmically."""
        assert source_count_score(11) == pytest.approx(85 + 5 * math.log10(2))

    def test_saturates_at_ninety(self):
        assert source_count_score(10_000) == 90.0

    def test_non_decreasing(self):
        scores = [source_count_score(n) for n in range(0, 300)]
        assert all(b >= a for a, b in zip(scores, scores[1:]))


# ── source_diversity_score ───────────────────────────────────────────────────────

class TestSourceDiversityScore:
    def test_single_citizen(self):
        assert source_diversity_score(["citizen"], _RELIABILITY, 0.5) == pytest.approx(
            0.6 / 2.1 * 60 + 15
        )

    def test_all_three_types_is_full_score(self):
        score = source_diversity_score(["citizen", "social", "official"], _RELIABILITY, 0.5)
        assert score == pytest.approx(100.0)

    def test_duplicates_do_not_count_twice(self):
        once = source_diversity_score(["citizen"], _RELIABILITY, 0.5)
        many = source_diversity_score(["citizen"] * 5, _RELIABILITY, 0.5)
        assert once == many

    def test_unknown_type_uses_default_reliability(self):
        score = source_diversity_score(["drone"], _RELIABILITY, 0.5)
        assert score == pytest.approx(0.5 / 2.1 * 60 + 15)

    def test_empty_is_zero(self):
        assert source_diversity_score([], _RELIABILITY, 0.5) == 0.0

    @pytest.mark.parametrize(
        "base, extra",
        [
            (["citizen"], "social"),
            (["social"], "citizen"),
            (["citizen"], "official"),
            (["citizen", "social"], "official"),
            (["official"], "social"),
        ],
    )
    def test_adding_a_type_never_lowers_score(self, base, extra):
        before = source_diversity_score(base, _RELIABILITY, 0.5)
        after = source_diversity_score(base + [extra], _RELIABILITY, 0.5)
        assert after >= before


# ── temporal / spatial consistency ───────────────────────────────────────────────

class TestTemporalConsistency:
    def test_single_report_is_neutral(self, make_report):
        assert temporal_consistency_score([make_report()]) == 50.0

    def test_simultaneous_reports_peak(self, make_report):
        reports = [make_report(minutes=0), make_report(minutes=0)]
        assert temporal_consistency_score(reports) == pytest.approx(95.0)

    def test_decays_with_mean_interval(self, make_report):
        """An 8-hour mean interval is one decay constant: floor + span / e."""
        reports = [make_report(minutes=0), make_report(minutes=480)]
        assert temporal_consistency_score(reports) == pytest.approx(40 + 55 / math.e)

    def test_tighter_is_higher(self, make_report):
        tight = temporal_consistency_score([make_report(minutes=0), make_report(minutes=20)])
        loose = temporal_consistency_score([make_report(minutes=0), make_report(minutes=600)])
        assert tight > loose

    def test_never_below_floor(self, make_report):
        reports = [make_report(minutes=0), make_report(minutes=60 * 24 * 365)]
        assert temporal_consistency_score(reports) >= 40.0


class TestSpatialConsistency:
    def test_single_report_is_neutral(self, make_report):
        assert spatial_consistency_score([make_report()]) == 50.0

    def test_coincident_reports_peak(self, make_report):
        assert spatial_consistency_score([make_report(), make_report()]) == pytest.approx(95.0)

    def test_spread_lowers_score(self, make_report):
        near = spatial_consistency_score([make_report(), make_report(lat=19.0770)])
        far = spatial_consistency_score([make_report(), make_report(lat=19.1560)])
        assert near > far
        assert far >= 40.0


# ── media / ai ───────────────────────────────────────────────────────────────────

class TestMediaEvidence:
    def test_no_media(self, make_report):
        assert media_evidence_score([make_report(), make_report()]) == 30.0

    def test_all_reports_with_media(self, make_report):
        reports = [make_report(media=1), make_report(media=1)]
        assert media_evidence_score(reports) == pytest.approx(84.0)

    def test_partial_media(self, make_report):
        """Half with media, one file: 40 + 20 + 2."""
        reports = [make_report(media=1), make_report()]
        assert media_evidence_score(reports) == pytest.approx(62.0)

    def test_file_bonus_capped(self, make_report):
        reports = [make_report(media=5) for _ in range(10)]
        assert media_evidence_score(reports) == 100.0

    def test_empty_is_zero(self):
        assert media_evidence_score([]) == 0.0


class TestAiConfidence:
    def test_unclassified_is_neutral(self, make_report):
        assert ai_confidence_score([make_report(confidence=0)]) == 50.0

    def test_mean_ignores_zero_confidence(self, make_report):
        reports = [make_report(confidence=80), make_report(confidence=0), make_report(confidence=60)]
        assert ai_confidence_score(reports) == pytest.approx(70.0)


# ── ConfidenceScorer.score ───────────────────────────────────────────────────────

class TestScore:
    def test_empty_input(self):
        """No reports: overall 0, all factors 0, breakdown says so."""
        result = ConfidenceScorer().score([])

        assert result.overall == 0.0
        assert all(v == 0.0 for v in result.factors.as_dict().values())
        assert result.breakdown == ["No reports to analyze"]

    def test_overall_within_bounds_and_rounded(self, make_report):
        reports = [make_report(confidence=70, media=2), make_report(minutes=45, lat=19.08)]
        result = ConfidenceScorer().score(reports)

        assert 0.0 <= result.overall <= 100.0
        assert result.overall == round(result.overall, 2)

    def test_every_factor_bounded(self, make_report):
        reports = [make_report(confidence=100, media=9) for _ in range(40)]
        factors = ConfidenceScorer().score(reports).factors.as_dict()

        assert all(0.0 <= v <= 100.0 for v in factors.values())

    def test_breakdown_contents(self, make_report):
        reports = [make_report(media=2), make_report(media=1)]
        breakdown = ConfidenceScorer().score(reports).breakdown

        assert breakdown[0] == "2 corroborating report(s) (50%)"
        assert breakdown[1] == "1 unique source type(s) (32%)"
        assert "Reports are temporally clustered (high consistency)" in breakdown
        assert "Reports are geographically clustered (high consistency)" in breakdown
        assert "3 media file(s) attached" in breakdown

    def test_custom_weights_select_factor(self, make_report):
        """With all weight on media evidence, a no-media set scores exactly 30."""
        config = FusionConfig(
            scoring_weights=ScoringWeights(
                source_count=0, source_diversity=0, temporal_consistency=0,
                spatial_consistency=0, media_evidence=1.0, ai_confidence=0,
            )
        )
        result = ConfidenceScorer(config).score([make_report(), make_report()])
        assert result.overall == pytest.approx(30.0)

    def test_module_wrapper_matches_class(self, make_report):
        reports = [make_report(confidence=65), make_report(minutes=10, confidence=75)]
        assert calculate_confidence_score(reports).overall == ConfidenceScorer().score(reports).overall

    def test_flooding_official_report_raises_confidence(self, make_report):
        """Two citizens plus an official report between them beat the citizens alone."""
        citizens = [
            make_report(minutes=0, lat=19.0760, confidence=70, severity="moderate"),
            make_report(minutes=30, lat=19.0800, confidence=70, severity="moderate"),
        ]
        official = make_report(
            minutes=60, lat=19.0780, source="official", confidence=70, severity="moderate"
        )
        scorer = ConfidenceScorer()

        assert scorer.score(citizens + [official]).overall > scorer.score(citizens).overall


# ── Corroboration ────────────────────────────────────────────────────────────────

class TestNewSourceTypeMonotonicity:
    @pytest.mark.parametrize("new_source", ["social", "official"])
    def test_distant_low_confidence_report_does_not_lower_score(self, make_report, new_source):
        """A far-off, late, low-confidence report of a new type still cannot lower the score."""
        cluster = [
            make_report(minutes=0, confidence=90, media=2),
            make_report(minutes=5, confidence=88, media=1),
        ]
        outsider = make_report(
            minutes=60 * 20, lat=19.15, source=new_source, confidence=5
        )
        scorer = ConfidenceScorer()

        assert scorer.score(cluster + [outsider]).overall >= scorer.score(cluster).overall

    def test_holds_for_adversarial_weights(self, make_report):
        """All weight on temporal consistency: a late report of a new type still cannot lower it."""
        config = FusionConfig(
            scoring_weights=ScoringWeights(
                source_count=0, source_diversity=0, temporal_consistency=1.0,
                spatial_consistency=0, media_evidence=0, ai_confidence=0,
            )
        )
        scorer = ConfidenceScorer(config)
        cluster = [make_report(minutes=0), make_report(minutes=0)]
        late = make_report(minutes=60 * 20, source="official")

        before = scorer.score(cluster)
        after = scorer.score(cluster + [late])

        assert after.overall >= before.overall
        assert after.factors.temporal_consistency < before.factors.temporal_consistency
        assert any(line.startswith("Score carried from citizen") for line in after.breakdown)

    def test_holds_across_type_combinations(self, make_report):
        scorer = ConfidenceScorer()
        base = [
            make_report(minutes=0, source="social", confidence=40),
            make_report(minutes=90, lat=19.10, source="social", confidence=45),
        ]
        grown = base + [make_report(minutes=700, lat=19.0, lon=72.95, source="citizen", confidence=1)]
        grown_more = grown + [make_report(minutes=1400, lat=19.16, source="official", confidence=1)]

        assert scorer.score(grown).overall >= scorer.score(base).overall
        assert scorer.score(grown_more).overall >= scorer.score(grown).overall


# ── determine_severity ───────────────────────────────────────────────────────────

class TestDetermineSeverity:
    def _reports(self, make_report, *severities):
        return [make_report(severity=s) for s in severities]

    def test_explicit_high_above_threshold(self, make_report):
        reports = self._reports(make_report, "high", "low", "low")
        assert ConfidenceScorer().determine_severity(reports, 61) == Severity.HIGH

    def test_explicit_high_at_threshold_falls_back_to_vote(self, make_report):
        """The high-severity rule needs confidence strictly above 60."""
        reports = self._reports(make_report, "high", "low", "low")
        assert ConfidenceScorer().determine_severity(reports, 60) == Severity.LOW

    def test_majority_vote(self, make_report):
        reports = self._reports(make_report, "moderate", "moderate", "low")
        assert ConfidenceScorer().determine_severity(reports, 30) == Severity.MODERATE

    @pytest.mark.parametrize("confidence", [10, 45, 55, 95])
    def test_tie_goes_to_more_severe_label(self, make_report, confidence):
        reports = self._reports(make_report, "moderate", "low")
        assert ConfidenceScorer().determine_severity(reports, confidence) == Severity.MODERATE

    def test_high_tie_below_threshold_still_high(self, make_report):
        """A high/low tie resolves to high even when the explicit-high rule does not fire."""
        reports = self._reports(make_report, "high", "low")
        assert ConfidenceScorer().determine_severity(reports, 40) == Severity.HIGH

    def test_unlabelled_reports_ignored_in_vote(self, make_report):
        reports = self._reports(make_report, None, None, "low")
        assert ConfidenceScorer().determine_severity(reports, 90) == Severity.LOW

    @pytest.mark.parametrize(
        "confidence, expected",
        [(85, Severity.HIGH), (80, Severity.HIGH), (50, Severity.MODERATE), (49.99, Severity.LOW)],
    )
    def test_bands_without_explicit_severity(self, make_report, confidence, expected):
        reports = self._reports(make_report, None, None)
        assert ConfidenceScorer().determine_severity(reports, confidence) == expected


# ── calculate_alert_priority / rank_alerts ───────────────────────────────────────

class TestAlertPriority:
    def _hours_later(self, alert, hours):
        return alert.timestamp + timedelta(hours=hours)

    def test_sum_of_components(self, make_alert):
        alert = make_alert(confidence=70, severity="high")
        # high 100 + active 50 + 0.3 * 70 + under six hours 10
        assert calculate_alert_priority(alert, self._hours_later(alert, 3)) == pytest.approx(181.0)

    @pytest.mark.parametrize(
        "age_hours, bonus",
        [(0, 20.0), (0.5, 20.0), (1, 10.0), (5.9, 10.0), (6, 0.0), (48, 0.0)],
    )
    def test_recency_bonus(self, make_alert, age_hours, bonus):
        alert = make_alert(confidence=0, severity="low")
        now = self._hours_later(alert, age_hours)
        assert calculate_alert_priority(alert, now) == pytest.approx(80.0 + bonus)

    @pytest.mark.parametrize(
        "status, score",
        [("active", 50.0), ("verified", 40.0), ("resolved", 10.0), ("false_alarm", 0.0)],
    )
    def test_status_scores(self, make_alert, status, score):
        alert = make_alert(confidence=0, severity="moderate", status=status)
        assert calculate_alert_priority(alert, self._hours_later(alert, 24)) == pytest.approx(60.0 + score)

    def test_unknown_severity_and_status_use_defaults(self, make_alert):
        alert = make_alert(confidence=0, severity="extreme", status="archived")
        assert calculate_alert_priority(alert, self._hours_later(alert, 24)) == pytest.approx(85.0)

    @pytest.mark.parametrize("bad", [float("nan"), 150.0, -5.0])
    def test_invalid_confidence_counts_as_zero(self, make_alert, bad):
        alert = make_alert(confidence=bad, severity="moderate")
        assert calculate_alert_priority(alert, self._hours_later(alert, 24)) == pytest.approx(110.0)

    def test_rank_alerts_orders_descending(self, make_alert):
        low = make_alert(alert_id="low", confidence=20, severity="low")
        high = make_alert(alert_id="high", confidence=80, severity="high")
        mid = make_alert(alert_id="mid", confidence=50, severity="moderate")
        now = self._hours_later(low, 24)

        assert [a.id for a in rank_alerts([low, high, mid], now)] == ["high", "mid", "low"]

    def test_fresh_alert_outranks_older_equal_alert(self, make_alert):
        older = make_alert(alert_id="older", hours=-12, severity="moderate")
        fresh = make_alert(alert_id="fresh", hours=0, severity="moderate")
        now = self._hours_later(fresh, 0.5)

        assert [a.id for a in rank_alerts([older, fresh], now)] == ["fresh", "older"]
