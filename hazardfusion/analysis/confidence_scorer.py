"""Multi-factor confidence scoring for HazardFusion.

Scores a set of reports on a 0–100 scale from six independently bounded factors:
  source_count          — saturating function of the number of reports
  source_diversity      — reliability of the distinct source channels present
  temporal_consistency  — smooth decay with the mean interval between reports
  spatial_consistency   — smooth decay with the mean distance from the centroid
  media_evidence        — share of reports carrying photos or video
  ai_confidence         — mean upstream classifier confidence

The overall score is the weighted sum of the factors, with one structural rule:
a set spanning several source types scores at least as high as any subset made
by dropping every report of one type. Corroboration from an extra channel can
therefore never weaken the case already made by the others, whatever the weights.

Pure functions — no I/O or external calls.
"""

from __future__ import annotations

import logging
import math
from collections import Counter
from datetime import datetime
from itertools import combinations
from typing import Iterable, List, Optional, Sequence, Tuple

from config.defaults import (
    NEUTRAL_FACTOR_SCORE,
    SPATIAL_DECAY_KM,
    SPATIAL_FLOOR_SCORE,
    SPATIAL_PEAK_SCORE,
    TEMPORAL_DECAY_HOURS,
    TEMPORAL_FLOOR_SCORE,
    TEMPORAL_PEAK_SCORE,
)
from config.settings import FusionConfig
from hazardfusion.models.alerts import Alert, AlertStatus
from hazardfusion.models.fusion import ConfidenceFactors, ConfidenceResult
from hazardfusion.models.reports import Report, Severity
from hazardfusion.utils.date_utils import ensure_utc, utcnow
from hazardfusion.utils.geo_utils import mean_distance_from_centroid_km

logger = logging.getLogger(__name__)

_NO_REPORTS = "No reports to analyze"

# Sum of reliabilities of all known channels; normalises the diversity factor
_DIVERSITY_RELIABILITY_POINTS = 60.0
_DIVERSITY_BONUS_PER_TYPE = 15.0
_DIVERSITY_BONUS_CAP = 40.0

_PRIORITY_SEVERITY_SCORE = {Severity.HIGH: 100.0, Severity.MODERATE: 60.0, Severity.LOW: 30.0}
_PRIORITY_SEVERITY_DEFAULT = 60.0
_PRIORITY_STATUS_SCORE = {
    AlertStatus.ACTIVE: 50.0,
    AlertStatus.VERIFIED: 40.0,
    AlertStatus.RESOLVED: 10.0,
    AlertStatus.FALSE_ALARM: 0.0,
}
_PRIORITY_STATUS_DEFAULT = 25.0
_PRIORITY_CONFIDENCE_FACTOR = 0.3


def _clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


# ── Individual factors ──────────────────────────────────────────────────────────


def source_count_score(report_count: int) -> float:
    """Saturating, non-decreasing score for the number of corroborating reports.

    Args:
        report_count: Number of reports in the set.

    Returns:
        Score in [0, 90].
    """
    if report_count <= 0:
        return 0.0
    if report_count == 1:
        return 30.0
    if report_count == 2:
        return 50.0
    if report_count <= 5:
        return 60.0 + (report_count - 2) * 5
    if report_count <= 10:
        return 75.0 + (report_count - 5) * 2
    return min(90.0, 85.0 + math.log10(report_count - 9) * 5)


def source_diversity_score(
    source_types: Iterable[str],
    reliability: dict,
    default_reliability: float,
) -> float:
    """Score the distinct source channels present.

    Reliabilities are summed rather than averaged, and the bonus grows with the
    number of distinct types, so adding a channel never lowers the score.

    Args:
        source_types: Source type of each report (duplicates allowed).
        reliability: Per-source reliability weights.
        default_reliability: Weight for a source type missing from ``reliability``.

    Returns:
        Score in [0, 100].
    """
    distinct = set(source_types)
    if not distinct:
        return 0.0
    total = sum(reliability.get(s, default_reliability) for s in distinct)
    max_total = sum(reliability.values()) or 1.0
    reliability_points = (total / max_total) * _DIVERSITY_RELIABILITY_POINTS
    bonus = min(len(distinct) * _DIVERSITY_BONUS_PER_TYPE, _DIVERSITY_BONUS_CAP)
    return _clamp(reliability_points + bonus)


def temporal_consistency_score(reports: Sequence[Report]) -> float:
    """Score how tightly the reports are grouped in time.

    Decays exponentially from TEMPORAL_PEAK_SCORE toward TEMPORAL_FLOOR_SCORE as
    the mean interval between consecutive reports grows.
    """
    timestamps = sorted(r.timestamp for r in reports if r.timestamp is not None)
    if len(timestamps) < 2:
        return NEUTRAL_FACTOR_SCORE
    span_hours = (timestamps[-1] - timestamps[0]).total_seconds() / 3600.0
    mean_interval = span_hours / (len(timestamps) - 1)
    decay = math.exp(-mean_interval / TEMPORAL_DECAY_HOURS)
    return _clamp(TEMPORAL_FLOOR_SCORE + (TEMPORAL_PEAK_SCORE - TEMPORAL_FLOOR_SCORE) * decay)


def spatial_consistency_score(reports: Sequence[Report]) -> float:
    """Score how tightly the reports are grouped in space.

    Decays exponentially from SPATIAL_PEAK_SCORE toward SPATIAL_FLOOR_SCORE as
    the mean distance from the cluster centroid grows.
    """
    points = [
        (r.location.latitude, r.location.longitude)
        for r in reports
        if r.location is not None
        and r.location.latitude is not None
        and r.location.longitude is not None
    ]
    if len(points) < 2:
        return NEUTRAL_FACTOR_SCORE
    mean_km = mean_distance_from_centroid_km(points)
    decay = math.exp(-mean_km / SPATIAL_DECAY_KM)
    return _clamp(SPATIAL_FLOOR_SCORE + (SPATIAL_PEAK_SCORE - SPATIAL_FLOOR_SCORE) * decay)


def media_evidence_score(reports: Sequence[Report]) -> float:
    """Score the share of reports with attached media, plus a bonus per file."""
    if not reports:
        return 0.0
    with_media = [r for r in reports if r.media_count > 0]
    if not with_media:
        return 30.0
    ratio = len(with_media) / len(reports)
    total_files = sum(r.media_count for r in reports)
    return _clamp(40.0 + ratio * 40.0 + min(total_files * 2.0, 20.0))


def ai_confidence_score(reports: Sequence[Report]) -> float:
    """Mean upstream classifier confidence.

    A confidence of 0 means the classifier never ran, so it is left out of the
    mean; with no classified report the factor is neutral.
    """
    confidences = [
        _clamp(float(r.classification.confidence))
        for r in reports
        if r.classification is not None and r.classification.confidence > 0
    ]
    if not confidences:
        return NEUTRAL_FACTOR_SCORE
    return sum(confidences) / len(confidences)


# ── Scorer ──────────────────────────────────────────────────────────────────────


class ConfidenceScorer:
    """Computes confidence scores and severities for sets of reports.

    Args:
        config: Fusion configuration supplying weights, reliabilities and
            severity thresholds. Defaults to FusionConfig().
    """

    def __init__(self, config: Optional[FusionConfig] = None) -> None:
        self.config = config or FusionConfig()

    def factors(self, reports: Sequence[Report]) -> ConfidenceFactors:
        if not reports:
            return ConfidenceFactors()
        cfg = self.config
        return ConfidenceFactors(
            source_count=_clamp(source_count_score(len(reports))),
            source_diversity=source_diversity_score(
                (r.source for r in reports),
                cfg.source_reliability,
                cfg.default_source_reliability,
            ),
            temporal_consistency=temporal_consistency_score(reports),
            spatial_consistency=spatial_consistency_score(reports),
            media_evidence=media_evidence_score(reports),
            ai_confidence=ai_confidence_score(reports),
        )

    def weighted(self, factors: ConfidenceFactors) -> float:
        weights = self.config.scoring_weights.as_dict()
        values = factors.as_dict()
        return _clamp(sum(values[name] * weights[name] for name in weights))

    def score(self, reports: Sequence[Report]) -> ConfidenceResult:
        """Score a set of reports.

        Args:
            reports: Reports to score (any order).

        Returns:
            ConfidenceResult with the overall score, factor breakdown and a
            list of human-readable explanations. Empty input yields all zeros.
        """
        if not reports:
            return ConfidenceResult(overall=0.0, factors=ConfidenceFactors(), breakdown=[_NO_REPORTS])

        factors = self.factors(reports)
        overall, carried_from = self._corroborated_overall(reports)
        overall = round(_clamp(overall), 2)

        breakdown = self._breakdown(reports, factors)
        if carried_from is not None:
            breakdown.append(
                f"Score carried from {'/'.join(carried_from)} reports ({overall:.0f}%)"
            )
        return ConfidenceResult(overall=overall, factors=factors, breakdown=breakdown)

    def _corroborated_overall(
        self, reports: Sequence[Report]
    ) -> Tuple[float, Optional[Tuple[str, ...]]]:
        """Best weighted score over every non-empty selection of source types.

        Returns:
            (score, kept_types) where kept_types is None when the full set wins.
        """
        best = self.weighted(self.factors(reports))
        carried_from: Optional[Tuple[str, ...]] = None

        types: List[str] = []
        for report in reports:
            if report.source not in types:
                types.append(report.source)
        if len(types) < 2:
            return best, None

        for size in range(1, len(types)):
            for kept in combinations(types, size):
                subset = [r for r in reports if r.source in kept]
                candidate = self.weighted(self.factors(subset))
                if candidate > best:
                    best = candidate
                    carried_from = kept
        return best, carried_from

    @staticmethod
    def _breakdown(reports: Sequence[Report], factors: ConfidenceFactors) -> List[str]:
        breakdown = [
            f"{len(reports)} corroborating report(s) ({round(factors.source_count)}%)",
            f"{len({r.source for r in reports})} unique source type(s) "
            f"({round(factors.source_diversity)}%)",
        ]
        if factors.temporal_consistency >= 80:
            breakdown.append("Reports are temporally clustered (high consistency)")
        if factors.spatial_consistency >= 80:
            breakdown.append("Reports are geographically clustered (high consistency)")
        media_count = sum(r.media_count for r in reports)
        if media_count:
            breakdown.append(f"{media_count} media file(s) attached")
        return breakdown

    def determine_severity(self, reports: Sequence[Report], confidence: float) -> str:
        """Derive a cluster severity from member reports and aggregate confidence.

        Vote ties among explicit severities resolve to the more severe label.

        Args:
            reports: Cluster members.
            confidence: Overall confidence of the cluster (0–100).

        Returns:
            One of Severity.LOW, Severity.MODERATE, Severity.HIGH.
        """
        cfg = self.config
        explicit = [
            r.classification.severity
            for r in reports
            if r.classification is not None and r.classification.severity in Severity.ALL
        ]

        if Severity.HIGH in explicit and confidence > cfg.high_severity_confidence_threshold:
            return Severity.HIGH

        if explicit:
            counts = Counter(explicit)
            top = max(counts.values())
            tied = [s for s in Severity.ALL if counts.get(s, 0) == top]
            return max(tied, key=Severity.rank)

        if confidence >= cfg.severity_high_band:
            return Severity.HIGH
        if confidence >= cfg.severity_moderate_band:
            return Severity.MODERATE
        return Severity.LOW


# ── Module-level helpers ────────────────────────────────────────────────────────


def calculate_confidence_score(
    reports: Sequence[Report], config: Optional[FusionConfig] = None
) -> ConfidenceResult:
    """Convenience wrapper around ConfidenceScorer.score()."""
    return ConfidenceScorer(config).score(reports)


def determine_severity(
    reports: Sequence[Report], confidence: float, config: Optional[FusionConfig] = None
) -> str:
    """Convenience wrapper around ConfidenceScorer.determine_severity()."""
    return ConfidenceScorer(config).determine_severity(reports, confidence)


def calculate_alert_priority(alert: Alert, now: Optional[datetime] = None) -> float:
    """Ranking value for ordering alerts in presentation layers.

    Sum of a severity score (high 100, moderate 60, low 30), a status score
    (active 50, verified 40, resolved 10, false_alarm 0), 0.3 × confidence
    and a recency bonus (+20 under one hour old, +10 under six hours).
    Unknown severities score as moderate and unknown statuses score 25.
    Read-only; plays no part in fusion decisions.

    Args:
        alert: Alert to rank.
        now: Reference time for the recency bonus. Defaults to utcnow().

    Returns:
        Priority; higher ranks first.
    """
    try:
        confidence = float(alert.confidence)
    except (TypeError, ValueError):
        confidence = 0.0
    if math.isnan(confidence) or not 0.0 <= confidence <= 100.0:
        confidence = 0.0

    priority = _PRIORITY_SEVERITY_SCORE.get(alert.severity, _PRIORITY_SEVERITY_DEFAULT)
    priority += _PRIORITY_STATUS_SCORE.get(alert.status, _PRIORITY_STATUS_DEFAULT)
    priority += confidence * _PRIORITY_CONFIDENCE_FACTOR

    if alert.timestamp is not None:
        age = ensure_utc(now or utcnow()) - ensure_utc(alert.timestamp)
        age_hours = age.total_seconds() / 3600.0
        if age_hours < 1:
            priority += 20.0
        elif age_hours < 6:
            priority += 10.0
    return priority


def rank_alerts(alerts: Iterable[Alert], now: Optional[datetime] = None) -> List[Alert]:
    """Return alerts ordered by priority, highest first (stable for ties)."""
    reference = now or utcnow()
    return sorted(alerts, key=lambda a: calculate_alert_priority(a, reference), reverse=True)
