"""Spatio-temporal clustering of pending hazard reports.

Groups reports that are close in space and time and describe a compatible
hazard into ReportCluster objects. A single greedy pass in input order: each
unclustered seed collects, from the still-unclustered reports, those related
to the seed and to every report already collected for it. Neighbours are not
expanded transitively, so a chain of reports each 8 km from the next does not
collapse into one cluster, and no two members are ever further apart than the
spatial radius or temporal window.

Pure computation — no I/O or external calls.
"""

from __future__ import annotations

import logging
import uuid
from collections import Counter
from typing import Callable, List, Optional, Sequence

from config.settings import FusionConfig
from hazardfusion.analysis.confidence_scorer import ConfidenceScorer
from hazardfusion.models.fusion import ReportCluster
from hazardfusion.models.reports import HazardType, Report
from hazardfusion.utils.date_utils import hours_between
from hazardfusion.utils.geo_utils import centroid, haversine_km

logger = logging.getLogger(__name__)

UNKNOWN_REGION = "Unknown"


def dominant_value(values: Sequence[Optional[str]], fallback: str) -> str:
    """Most frequent non-empty value; ties go to the one seen first.

    Args:
        values: Candidate values in input order (None and "" are ignored).
        fallback: Returned when no candidate is present.
    """
    present = [v for v in values if v]
    if not present:
        return fallback
    counts = Counter(present)
    top = max(counts.values())
    for value in present:
        if counts[value] == top:
            return value
    return fallback


class ClusterEngine:
    """Groups related reports into clusters.

    Args:
        config: Fusion configuration (radius, window, minimum cluster size).
        scorer: Confidence scorer used to score each cluster; built from
            ``config`` when omitted.
        id_factory: Callable producing cluster ids.
    """

    def __init__(
        self,
        config: Optional[FusionConfig] = None,
        scorer: Optional[ConfidenceScorer] = None,
        id_factory: Callable[[], str] = lambda: str(uuid.uuid4()),
    ) -> None:
        self.config = config or FusionConfig()
        self.scorer = scorer or ConfidenceScorer(self.config)
        self._id_factory = id_factory

    def are_reports_related(self, a: Report, b: Report) -> bool:
        """True when two reports are close in space and time with compatible hazards."""
        distance = haversine_km(
            a.location.latitude, a.location.longitude,
            b.location.latitude, b.location.longitude,
        )
        if distance > self.config.spatial_radius_km:
            return False

        if hours_between(a.timestamp, b.timestamp) > self.config.temporal_window_hours:
            return False

        hazard_a = a.classification.hazard_type if a.classification else None
        hazard_b = b.classification.hazard_type if b.classification else None
        # Unclassified reports are compatible with any hazard type
        if hazard_a and hazard_b and hazard_a != hazard_b:
            return False
        return True

    def cluster(self, reports: Sequence[Report]) -> List[ReportCluster]:
        """Cluster reports in a single pass.

        Args:
            reports: Well-formed reports (timestamp and coordinates present).

        Returns:
            Clusters in seed order. Reports that could not join a cluster of at
            least ``min_cluster_size`` members are left out.
        """
        if not reports:
            return []

        clustered: set = set()
        clusters: List[ReportCluster] = []

        for seed in reports:
            if seed.id in clustered:
                continue

            members = [seed]
            member_ids = {seed.id}
            for other in reports:
                if other.id in clustered or other.id in member_ids:
                    continue
                # Every pair in a cluster must be related, not just seed and neighbour
                if all(self.are_reports_related(m, other) for m in members):
                    members.append(other)
                    member_ids.add(other.id)

            if len(members) < self.config.min_cluster_size:
                continue

            for member in members:
                clustered.add(member.id)
            clusters.append(self._build_cluster(members))

        logger.info(
            "Clustered %d reports into %d clusters (%d unclustered)",
            len(reports), len(clusters), len(reports) - len(clustered),
        )
        return clusters

    def _build_cluster(self, members: List[Report]) -> ReportCluster:
        points = [(r.location.latitude, r.location.longitude) for r in members]
        timestamps = [r.timestamp for r in members]

        score = self.scorer.score(members)
        severity = self.scorer.determine_severity(members, score.overall)

        cluster = ReportCluster(
            id=self._id_factory(),
            reports=list(members),
            centroid=centroid(points),
            hazard_type=dominant_value(
                [r.classification.hazard_type for r in members if r.classification],
                HazardType.OTHER,
            ),
            region=dominant_value([r.region for r in members], UNKNOWN_REGION),
            severity=severity,
            confidence=score.overall,
            start_time=min(timestamps),
            end_time=max(timestamps),
            score=score,
        )
        logger.debug(
            "Cluster %s: %d reports, %s/%s, confidence=%.2f, severity=%s",
            cluster.id, cluster.size, cluster.hazard_type, cluster.region,
            cluster.confidence, cluster.severity,
        )
        return cluster
