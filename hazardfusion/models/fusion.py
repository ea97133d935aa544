"""Fusion data models for HazardFusion.

Defines the confidence score breakdown, the ephemeral report cluster, and the
result of one fusion cycle.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from hazardfusion.models.alerts import Alert
from hazardfusion.models.reports import Report


@dataclass
class ConfidenceFactors:
    """The six independently bounded sub-scores (each 0–100)."""

    source_count: float = 0.0
    source_diversity: float = 0.0
    temporal_consistency: float = 0.0
    spatial_consistency: float = 0.0
    media_evidence: float = 0.0
    ai_confidence: float = 0.0

    def as_dict(self) -> Dict[str, float]:
        return {
            "source_count": self.source_count,
            "source_diversity": self.source_diversity,
            "temporal_consistency": self.temporal_consistency,
            "spatial_consistency": self.spatial_consistency,
            "media_evidence": self.media_evidence,
            "ai_confidence": self.ai_confidence,
        }


@dataclass
class ConfidenceResult:
    """Output of the confidence scorer for a set of reports."""

    overall: float = 0.0
    factors: ConfidenceFactors = field(default_factory=ConfidenceFactors)
    breakdown: List[str] = field(default_factory=list)


@dataclass
class ReportCluster:
    """A group of reports judged to describe one real-world hazard event.

    Clusters are never persisted; they live for a single fusion cycle.
    """

    id: str
    reports: List[Report]
    centroid: Tuple[float, float]       # (lat, lon), arithmetic mean of members
    hazard_type: str
    region: str
    severity: str
    confidence: float
    start_time: datetime
    end_time: datetime
    score: Optional[ConfidenceResult] = None

    @property
    def size(self) -> int:
        return len(self.reports)

    @property
    def report_ids(self) -> List[str]:
        return [r.id for r in self.reports]

    @property
    def source_types(self) -> List[str]:
        """Distinct source types in first-seen order."""
        seen: List[str] = []
        for report in self.reports:
            if report.source not in seen:
                seen.append(report.source)
        return seen


class CycleState:
    """States of the fusion cycle state machine."""

    IDLE = "IDLE"
    FETCHING = "FETCHING"
    CLUSTERING = "CLUSTERING"
    PROCESSING = "PROCESSING"
    INVALIDATING = "INVALIDATING"
    DONE = "DONE"
    FAILED = "FAILED"


@dataclass
class FusionResult:
    """Complete output of one fusion cycle."""

    clusters: List[ReportCluster] = field(default_factory=list)   # including skipped
    new_alerts: List[Alert] = field(default_factory=list)
    updated_alerts: List[Alert] = field(default_factory=list)
    processed_report_ids: List[str] = field(default_factory=list)
    skipped_cluster_ids: List[str] = field(default_factory=list)
    malformed_report_ids: List[str] = field(default_factory=list)
    cycle_id: str = ""
    state: str = CycleState.IDLE

    @property
    def is_empty(self) -> bool:
        return not self.clusters and not self.new_alerts and not self.updated_alerts
