"""Construction of new alerts from report clusters."""

from __future__ import annotations

import logging
import uuid
from typing import Callable, Optional

from config.settings import FusionConfig
from hazardfusion.models.alerts import (
    Alert,
    AlertRegion,
    AlertStatus,
    EscalationReason,
    GeoPolygon,
)
from hazardfusion.models.fusion import ReportCluster
from hazardfusion.utils.date_utils import format_time_window, utcnow
from hazardfusion.utils.geo_utils import bounding_square

logger = logging.getLogger(__name__)


def alert_summary(cluster: ReportCluster) -> str:
    """One-line summary, e.g. ``"High storm surge alert: 3 reports in Bay Area"``."""
    hazard_words = cluster.hazard_type.replace("_", " ")
    return (
        f"{cluster.severity.capitalize()} {hazard_words} alert: "
        f"{cluster.size} reports in {cluster.region}"
    )


class AlertFactory:
    """Turns an escalated cluster into a new active Alert.

    Args:
        config: Fusion configuration (radius, bbox size, thresholds met).
        clock: Returns the current UTC time; injectable for tests.
        id_factory: Produces alert ids.
    """

    def __init__(
        self,
        config: Optional[FusionConfig] = None,
        clock: Callable = utcnow,
        id_factory: Callable[[], str] = lambda: str(uuid.uuid4()),
    ) -> None:
        self.config = config or FusionConfig()
        self._clock = clock
        self._id_factory = id_factory

    def create(self, cluster: ReportCluster) -> Alert:
        cfg = self.config
        lat, lon = cluster.centroid
        radius = cfg.spatial_radius_km

        alert = Alert(
            id=self._id_factory(),
            timestamp=self._clock(),
            region=AlertRegion(
                name=cluster.region,
                bounds=GeoPolygon(coordinates=bounding_square(lat, lon, cfg.bbox_half_size_deg)),
                affected_population=0,
            ),
            hazard_type=cluster.hazard_type,
            severity=cluster.severity,
            confidence=cluster.confidence,
            escalation_reason=EscalationReason(
                report_count=cluster.size,
                source_types=cluster.source_types,
                time_window=format_time_window(cluster.start_time, cluster.end_time),
                geographic_spread=radius,
                thresholds_met=list(cfg.thresholds_met),
                reasoning=f"Clustered {cluster.size} reports within {radius:g} km radius",
            ),
            related_reports=cluster.report_ids,
            status=AlertStatus.ACTIVE,
            ai_summary=alert_summary(cluster),
        )
        logger.info(
            "New alert %s: %s (confidence=%.2f)", alert.id, alert.ai_summary, alert.confidence
        )
        return alert
