"""Deduplication of clusters against existing alerts.

A cluster that describes an event already covered by an active alert is merged
into that alert instead of raising a second one. Pure computation.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Iterable, List, Optional

from config.settings import FusionConfig
from hazardfusion.models.alerts import Alert, AlertStatus
from hazardfusion.models.fusion import ReportCluster
from hazardfusion.utils.date_utils import hours_between

logger = logging.getLogger(__name__)


class AlertMatcher:
    """Finds and merges the active alert a cluster belongs to.

    Args:
        config: Fusion configuration (match window).
    """

    def __init__(self, config: Optional[FusionConfig] = None) -> None:
        self.config = config or FusionConfig()

    def matches(self, alert: Alert, cluster: ReportCluster) -> bool:
        if alert.status != AlertStatus.ACTIVE:
            return False
        if alert.hazard_type != cluster.hazard_type:
            return False
        if alert.region_name != cluster.region:
            return False
        return hours_between(alert.timestamp, cluster.start_time) <= self.config.match_window_hours

    def find_match(self, cluster: ReportCluster, alerts: Iterable[Alert]) -> Optional[Alert]:
        """First active alert, in input order, that the cluster belongs to.

        Args:
            cluster: Newly built cluster.
            alerts: Candidate alerts; non-active ones are ignored.

        Returns:
            The matching alert, or None.
        """
        for alert in alerts:
            if self.matches(alert, cluster):
                logger.debug("Cluster %s matches alert %s", cluster.id, alert.id)
                return alert
        return None

    @staticmethod
    def merge(existing: Alert, cluster: ReportCluster) -> Alert:
        """Fold a cluster's evidence into an existing alert.

        Returns a new Alert; ``existing`` is left untouched. Related reports
        become the ordered union (existing first, no duplicates) and confidence
        the larger of the two. Every other field is carried over.
        """
        related: List[str] = list(existing.related_reports)
        seen = set(related)
        for report_id in cluster.report_ids:
            if report_id not in seen:
                related.append(report_id)
                seen.add(report_id)

        merged = dataclasses.replace(
            existing,
            related_reports=related,
            confidence=max(existing.confidence, cluster.confidence),
        )
        logger.info(
            "Merged cluster %s into alert %s: %d -> %d related reports, confidence %.2f -> %.2f",
            cluster.id, existing.id, len(existing.related_reports), len(related),
            existing.confidence, merged.confidence,
        )
        return merged
