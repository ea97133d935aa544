"""Translation between storage rows, plain dicts and the typed models.

Rows are flat mappings keyed by column name (sqlite3.Row or dict). Array and
polygon columns hold JSON text. Every conversion is explicit so a schema change
shows up here and nowhere else.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional

from hazardfusion.models.alerts import (
    Alert,
    AlertRegion,
    AlertStatus,
    EscalationReason,
    GeoPolygon,
)
from hazardfusion.models.reports import (
    GeoLocation,
    MediaFile,
    Report,
    ReportClassification,
    ReportContent,
    ReportMetadata,
    ReportStatus,
)
from hazardfusion.utils.date_utils import parse_timestamp, to_iso

logger = logging.getLogger(__name__)


def _json_list(raw: Any) -> List[Any]:
    if raw is None or raw == "":
        return []
    if isinstance(raw, list):
        return raw
    try:
        value = json.loads(raw)
    except (TypeError, ValueError):
        logger.warning("Discarding unparseable JSON column value: %.60r", raw)
        return []
    return value if isinstance(value, list) else []


def _optional_float(raw: Any) -> Optional[float]:
    if raw is None or raw == "":
        return None
    try:
        return float(raw)
    except (TypeError, ValueError):
        return None


# ── Reports ─────────────────────────────────────────────────────────────────────


def row_to_media_file(row: Mapping[str, Any]) -> MediaFile:
    metadata = row["metadata"] if "metadata" in row.keys() else None
    if isinstance(metadata, str):
        try:
            metadata = json.loads(metadata)
        except ValueError:
            metadata = {}
    return MediaFile(
        id=row["id"],
        file_name=row["file_name"],
        file_path=row["file_path"],
        file_type=row["file_type"],
        file_size=int(row["file_size"] or 0),
        mime_type=row["mime_type"] or "",
        metadata=metadata or {},
        created_at=parse_timestamp(row["created_at"]),
    )


def media_file_to_row(media: MediaFile, report_id: str) -> Dict[str, Any]:
    return {
        "id": media.id,
        "report_id": report_id,
        "file_name": media.file_name,
        "file_path": media.file_path,
        "file_type": media.file_type,
        "file_size": media.file_size,
        "mime_type": media.mime_type,
        "metadata": json.dumps(media.metadata or {}),
        "created_at": to_iso(media.created_at),
    }


def row_to_report(row: Mapping[str, Any], media_files: Iterable[MediaFile] = ()) -> Report:
    """Build a Report from a ``reports`` row and its media rows.

    Invalid coordinates and timestamps are carried through as None rather than
    rejected; the orchestrator decides what to do with malformed reports.
    """
    return Report(
        id=row["id"],
        timestamp=parse_timestamp(row["timestamp"]),
        location=GeoLocation(
            latitude=_optional_float(row["latitude"]),
            longitude=_optional_float(row["longitude"]),
            accuracy=_optional_float(row["location_accuracy"]),
            address=row["address"],
        ),
        source=row["source_type"],
        content=ReportContent(
            original_text=row["original_text"] or "",
            translated_text=row["translated_text"],
            language=row["language"] or "en",
            media_files=list(media_files),
        ),
        classification=ReportClassification(
            hazard_type=row["hazard_type"],
            severity=row["severity"],
            confidence=_optional_float(row["confidence"]) or 0.0,
        ),
        status=row["status"] or ReportStatus.PENDING,
        region=row["region"] or "",
        ai_summary=row["ai_summary"],
        metadata=ReportMetadata(
            device_info=row["device_info"],
            ip_address=row["ip_address"],
            user_agent=row["user_agent"],
        ),
        created_at=parse_timestamp(row["created_at"]),
        updated_at=parse_timestamp(row["updated_at"]),
    )


def report_to_row(report: Report) -> Dict[str, Any]:
    """Flatten a Report into ``reports`` columns (media files excluded)."""
    return {
        "id": report.id,
        "timestamp": to_iso(report.timestamp),
        "latitude": report.location.latitude if report.location else None,
        "longitude": report.location.longitude if report.location else None,
        "location_accuracy": report.location.accuracy if report.location else None,
        "address": report.location.address if report.location else None,
        "region": report.region,
        "source_type": report.source,
        "original_text": report.content.original_text,
        "translated_text": report.content.translated_text,
        "language": report.content.language,
        "hazard_type": report.classification.hazard_type,
        "severity": report.classification.severity,
        "confidence": report.classification.confidence,
        "status": report.status,
        "ai_summary": report.ai_summary,
        "device_info": report.metadata.device_info,
        "ip_address": report.metadata.ip_address,
        "user_agent": report.metadata.user_agent,
        "created_at": to_iso(report.created_at),
        "updated_at": to_iso(report.updated_at),
    }


# ── Alerts ──────────────────────────────────────────────────────────────────────


def row_to_alert(row: Mapping[str, Any]) -> Alert:
    bounds = _json_list(row["region_bounds"])
    return Alert(
        id=row["id"],
        incident_id=row["incident_id"],
        timestamp=parse_timestamp(row["timestamp"]),
        region=AlertRegion(
            name=row["region_name"],
            bounds=GeoPolygon(coordinates=bounds),
            affected_population=int(row["affected_population"] or 0),
        ),
        hazard_type=row["hazard_type"],
        severity=row["severity"],
        confidence=float(row["confidence"]),
        escalation_reason=EscalationReason(
            report_count=int(row["report_count"] or 0),
            source_types=_json_list(row["source_types"]),
            time_window=row["time_window"] or "",
            geographic_spread=_optional_float(row["geographic_spread"]) or 0.0,
            thresholds_met=_json_list(row["thresholds_met"]),
            reasoning=row["reasoning"] or "",
        ),
        related_reports=_json_list(row["related_reports"]),
        status=row["status"] or AlertStatus.ACTIVE,
        ai_summary=row["ai_summary"] or "",
        created_at=parse_timestamp(row["created_at"]),
        updated_at=parse_timestamp(row["updated_at"]),
    )


def alert_to_row(alert: Alert) -> Dict[str, Any]:
    reason = alert.escalation_reason
    return {
        "id": alert.id,
        "incident_id": alert.incident_id,
        "timestamp": to_iso(alert.timestamp),
        "region_name": alert.region.name,
        "region_bounds": json.dumps(alert.region.bounds.coordinates),
        "affected_population": alert.region.affected_population,
        "hazard_type": alert.hazard_type,
        "severity": alert.severity,
        "confidence": alert.confidence,
        "report_count": reason.report_count,
        "source_types": json.dumps(reason.source_types),
        "time_window": reason.time_window,
        "geographic_spread": reason.geographic_spread,
        "thresholds_met": json.dumps(reason.thresholds_met),
        "reasoning": reason.reasoning,
        "related_reports": json.dumps(alert.related_reports),
        "status": alert.status,
        "ai_summary": alert.ai_summary,
        "created_at": to_iso(alert.created_at),
        "updated_at": to_iso(alert.updated_at),
    }


# ── Plain dicts (JSON fixtures, seed data) ──────────────────────────────────────


def report_from_dict(data: Mapping[str, Any]) -> Report:
    """Build a Report from a nested dict shaped like ``report_to_dict`` output.

    Only ``id``, ``location``, ``source`` and ``content.original_text`` are
    required; everything else falls back to model defaults.
    """
    location = data.get("location") or {}
    content = data.get("content") or {}
    classification = data.get("classification") or {}
    metadata = data.get("metadata") or {}

    media_files = [
        MediaFile(
            id=m["id"],
            file_name=m.get("file_name", ""),
            file_path=m.get("file_path", ""),
            file_type=m.get("file_type", ""),
            file_size=int(m.get("file_size") or 0),
            mime_type=m.get("mime_type") or "",
            metadata=m.get("metadata") or {},
            created_at=parse_timestamp(m.get("created_at")),
        )
        for m in content.get("media_files") or []
    ]

    return Report(
        id=data["id"],
        timestamp=parse_timestamp(data.get("timestamp")),
        location=GeoLocation(
            latitude=_optional_float(location.get("latitude")),
            longitude=_optional_float(location.get("longitude")),
            accuracy=_optional_float(location.get("accuracy")),
            address=location.get("address"),
        ),
        source=data["source"],
        content=ReportContent(
            original_text=content.get("original_text", ""),
            translated_text=content.get("translated_text"),
            language=content.get("language") or "en",
            media_files=media_files,
        ),
        classification=ReportClassification(
            hazard_type=classification.get("hazard_type"),
            severity=classification.get("severity"),
            confidence=_optional_float(classification.get("confidence")) or 0.0,
        ),
        status=data.get("status") or ReportStatus.PENDING,
        region=data.get("region") or "",
        ai_summary=data.get("ai_summary"),
        metadata=ReportMetadata(
            device_info=metadata.get("device_info"),
            ip_address=metadata.get("ip_address"),
            user_agent=metadata.get("user_agent"),
        ),
        created_at=parse_timestamp(data.get("created_at")),
        updated_at=parse_timestamp(data.get("updated_at")),
    )


def report_to_dict(report: Report) -> Dict[str, Any]:
    return {
        "id": report.id,
        "timestamp": to_iso(report.timestamp),
        "location": {
            "latitude": report.location.latitude,
            "longitude": report.location.longitude,
            "accuracy": report.location.accuracy,
            "address": report.location.address,
        },
        "source": report.source,
        "content": {
            "original_text": report.content.original_text,
            "translated_text": report.content.translated_text,
            "language": report.content.language,
            "media_files": [
                {
                    "id": m.id,
                    "file_name": m.file_name,
                    "file_path": m.file_path,
                    "file_type": m.file_type,
                    "file_size": m.file_size,
                    "mime_type": m.mime_type,
                    "metadata": m.metadata,
                    "created_at": to_iso(m.created_at),
                }
                for m in report.content.media_files
            ],
        },
        "classification": {
            "hazard_type": report.classification.hazard_type,
            "severity": report.classification.severity,
            "confidence": report.classification.confidence,
        },
        "status": report.status,
        "region": report.region,
        "ai_summary": report.ai_summary,
        "metadata": {
            "device_info": report.metadata.device_info,
            "ip_address": report.metadata.ip_address,
            "user_agent": report.metadata.user_agent,
        },
        "created_at": to_iso(report.created_at),
        "updated_at": to_iso(report.updated_at),
    }
