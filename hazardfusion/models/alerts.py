"""Alert data models for HazardFusion.

An alert is the persisted, public-facing outcome of escalating a sufficiently
confident report cluster. Alerts are created by the AlertFactory and grown by
AlertMatcher merges; status changes beyond "active" happen outside the core.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional


class AlertStatus:
    """Lifecycle status of an alert. Only ACTIVE alerts absorb new clusters."""

    ACTIVE = "active"
    VERIFIED = "verified"
    RESOLVED = "resolved"
    FALSE_ALARM = "false_alarm"

    ALL = (ACTIVE, VERIFIED, RESOLVED, FALSE_ALARM)


@dataclass
class GeoPolygon:
    """GeoJSON-style polygon: a list of closed rings of [lon, lat] pairs."""

    coordinates: List[List[List[float]]] = field(default_factory=list)
    type: str = "Polygon"


@dataclass
class AlertRegion:
    name: str
    bounds: GeoPolygon = field(default_factory=GeoPolygon)
    affected_population: int = 0


@dataclass
class EscalationReason:
    """Why a cluster was escalated into an alert."""

    report_count: int
    source_types: List[str] = field(default_factory=list)
    time_window: str = ""
    geographic_spread: float = 0.0     # km
    thresholds_met: List[str] = field(default_factory=list)
    reasoning: str = ""


@dataclass
class Alert:
    """A public hazard alert backed by one or more report clusters."""

    id: str
    timestamp: datetime
    region: AlertRegion
    hazard_type: str
    severity: str
    confidence: float
    escalation_reason: EscalationReason
    related_reports: List[str] = field(default_factory=list)
    status: str = AlertStatus.ACTIVE
    ai_summary: str = ""
    incident_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_active(self) -> bool:
        return self.status == AlertStatus.ACTIVE

    @property
    def region_name(self) -> str:
        return self.region.name if self.region else ""
