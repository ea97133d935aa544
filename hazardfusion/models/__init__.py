"""HazardFusion data models package.

All component input/output schemas are defined here as typed dataclasses.
Storage-format concerns stay at the repository boundary (io/row_mapping.py).
"""

from hazardfusion.models.alerts import (
    Alert,
    AlertRegion,
    AlertStatus,
    EscalationReason,
    GeoPolygon,
)
from hazardfusion.models.fusion import (
    ConfidenceFactors,
    ConfidenceResult,
    CycleState,
    FusionResult,
    ReportCluster,
)
from hazardfusion.models.reports import (
    GeoLocation,
    HazardType,
    MediaFile,
    Report,
    ReportClassification,
    ReportContent,
    ReportMetadata,
    ReportStatus,
    Severity,
    SourceType,
)

__all__ = [
    # reports
    "Report",
    "GeoLocation",
    "MediaFile",
    "ReportContent",
    "ReportClassification",
    "ReportMetadata",
    "ReportStatus",
    "SourceType",
    "Severity",
    "HazardType",
    # alerts
    "Alert",
    "AlertRegion",
    "AlertStatus",
    "EscalationReason",
    "GeoPolygon",
    # fusion
    "ConfidenceFactors",
    "ConfidenceResult",
    "ReportCluster",
    "FusionResult",
    "CycleState",
]
