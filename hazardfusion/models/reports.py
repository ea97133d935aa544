"""Report data models for HazardFusion.

Defines the hazard report submitted by citizens, derived from social posts, or
received from official feeds. Reports are created by ingestion; the fusion core
only ever changes their status.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional


class SourceType:
    """Channel a report arrived through."""

    CITIZEN = "citizen"
    SOCIAL = "social"
    OFFICIAL = "official"

    ALL = (CITIZEN, SOCIAL, OFFICIAL)


class ReportStatus:
    """Processing status of a report. Only PENDING reports are clustered."""

    PENDING = "pending"
    VERIFIED = "verified"
    REJECTED = "rejected"

    ALL = (PENDING, VERIFIED, REJECTED)


class Severity:
    """Qualitative hazard impact level."""

    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"

    ALL = (LOW, MODERATE, HIGH)

    _RANK = {LOW: 0, MODERATE: 1, HIGH: 2}

    @classmethod
    def rank(cls, severity: str) -> int:
        """Return the ordinal rank of a severity label (low=0 … high=2)."""
        return cls._RANK.get(severity, cls._RANK[cls.MODERATE])


class HazardType:
    """Coastal hazard categories recognised by the classifier."""

    FLOODING = "flooding"
    STORM_SURGE = "storm_surge"
    HIGH_WAVES = "high_waves"
    EROSION = "erosion"
    RIP_CURRENT = "rip_current"
    TSUNAMI = "tsunami"
    POLLUTION = "pollution"
    OTHER = "other"

    ALL = (
        FLOODING,
        STORM_SURGE,
        HIGH_WAVES,
        EROSION,
        RIP_CURRENT,
        TSUNAMI,
        POLLUTION,
        OTHER,
    )


@dataclass
class GeoLocation:
    """Point location of a report. Coordinates may be None only for malformed input."""

    latitude: Optional[float]
    longitude: Optional[float]
    accuracy: Optional[float] = None   # metres
    address: Optional[str] = None


@dataclass
class MediaFile:
    """A photo or video attached to a report as supporting evidence."""

    id: str
    file_name: str
    file_path: str
    file_type: str
    file_size: int = 0
    mime_type: str = ""
    metadata: Dict[str, Any] = field(default_factory=dict)
    created_at: Optional[datetime] = None


@dataclass
class ReportContent:
    original_text: str
    translated_text: Optional[str] = None
    language: str = "en"
    media_files: List[MediaFile] = field(default_factory=list)


@dataclass
class ReportClassification:
    """Upstream classifier output. Confidence is on a 0–100 scale."""

    hazard_type: Optional[str] = None
    severity: Optional[str] = None
    confidence: float = 0.0


@dataclass
class ReportMetadata:
    device_info: Optional[str] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None


@dataclass
class Report:
    """A single hazard report from any source channel."""

    id: str
    timestamp: Optional[datetime]
    location: GeoLocation
    source: str
    content: ReportContent
    classification: ReportClassification = field(default_factory=ReportClassification)
    status: str = ReportStatus.PENDING
    region: str = ""
    ai_summary: Optional[str] = None
    metadata: ReportMetadata = field(default_factory=ReportMetadata)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def media_count(self) -> int:
        return len(self.content.media_files)

    @property
    def is_pending(self) -> bool:
        return self.status == ReportStatus.PENDING

    def missing_fields(self) -> List[str]:
        """List the clustering-critical fields this report lacks.

        Returns:
            Human-readable problem descriptions; empty when the report is well formed.
        """
        problems: List[str] = []
        if self.timestamp is None:
            problems.append("missing timestamp")
        if self.location is None:
            problems.append("missing location")
            return problems
        if self.location.latitude is None or self.location.longitude is None:
            problems.append("missing coordinates")
        elif not (-90.0 <= self.location.latitude <= 90.0) or not (
            -180.0 <= self.location.longitude <= 180.0
        ):
            problems.append(
                f"coordinates out of range ({self.location.latitude}, {self.location.longitude})"
            )
        return problems

    def __hash__(self) -> int:
        return hash(self.id)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Report):
            return NotImplemented
        return self.id == other.id
