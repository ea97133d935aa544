"""Shared pytest fixtures for HazardFusion tests.

Conventions:
- Fixture data lives in tests/fixtures/ as static JSON files
- make_report builds well-formed reports around a fixed coastal point and time
- Repositories and caches are in-memory; SQLite tests use tmp_path
- No real external HTTP or Redis calls are made in any test
"""

from __future__ import annotations

import json
import uuid
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Dict, List

import pytest

_FIXTURES_DIR = Path(__file__).parent / "fixtures"

# Reference point on the Mumbai coastline and reference time for all factories
BASE_LAT = 19.0760
BASE_LON = 72.8777
T0 = datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)


# ── Raw fixture data loaders ─────────────────────────────────────────────────────

@pytest.fixture(scope="session")
def sample_reports_raw() -> List[Dict[str, Any]]:
    """Raw report dicts: a 3-report storm surge event, a 2-report flood, one isolated report."""
    with open(_FIXTURES_DIR / "sample_reports.json", encoding="utf-8") as f:
        return json.load(f)


@pytest.fixture
def sample_reports(sample_reports_raw):
    from hazardfusion.io.row_mapping import report_from_dict

    return [report_from_dict(d) for d in sample_reports_raw]


# ── Model factories ──────────────────────────────────────────────────────────────

@pytest.fixture
def make_report():
    """Factory for well-formed pending reports.

    Offsets are relative to T0 / (BASE_LAT, BASE_LON): 0.01° of latitude is
    about 1.1 km.
    """
    from hazardfusion.models.reports import (
        GeoLocation,
        MediaFile,
        Report,
        ReportClassification,
        ReportContent,
    )

    def _make(
        report_id: str = "",
        minutes: float = 0,
        lat: float = BASE_LAT,
        lon: float = BASE_LON,
        source: str = "citizen",
        hazard: Any = "flooding",
        severity: Any = None,
        confidence: float = 0.0,
        region: str = "Mumbai Coast",
        status: str = "pending",
        media: int = 0,
    ) -> Report:
        rid = report_id or str(uuid.uuid4())
        return Report(
            id=rid,
            timestamp=T0 + timedelta(minutes=minutes),
            location=GeoLocation(latitude=lat, longitude=lon),
            source=source,
            content=ReportContent(
                original_text=f"{hazard or 'hazard'} reported",
                media_files=[
                    MediaFile(
                        id=f"{rid}-m{i}",
                        file_name=f"photo{i}.jpg",
                        file_path=f"uploads/{rid}/photo{i}.jpg",
                        file_type="image",
                        file_size=1024,
                        mime_type="image/jpeg",
                    )
                    for i in range(media)
                ],
            ),
            classification=ReportClassification(
                hazard_type=hazard, severity=severity, confidence=confidence
            ),
            status=status,
            region=region,
        )

    return _make


@pytest.fixture
def make_alert():
    """Factory for stored-looking active alerts."""
    from hazardfusion.models.alerts import (
        Alert,
        AlertRegion,
        EscalationReason,
        GeoPolygon,
    )

    def _make(
        alert_id: str = "",
        hours: float = 0,
        hazard: str = "flooding",
        region: str = "Mumbai Coast",
        severity: str = "moderate",
        confidence: float = 60.0,
        related: Any = None,
        status: str = "active",
    ) -> Alert:
        related = list(related) if related is not None else ["r-old-1", "r-old-2"]
        return Alert(
            id=alert_id or str(uuid.uuid4()),
            timestamp=T0 + timedelta(hours=hours),
            region=AlertRegion(name=region, bounds=GeoPolygon(coordinates=[])),
            hazard_type=hazard,
            severity=severity,
            confidence=confidence,
            escalation_reason=EscalationReason(report_count=len(related)),
            related_reports=related,
            status=status,
            ai_summary=f"{severity.capitalize()} {hazard} alert",
        )

    return _make


# ── Configuration and collaborators ──────────────────────────────────────────────

@pytest.fixture
def fusion_config():
    """Default FusionConfig with the in-memory cache backend."""
    from config.settings import FusionConfig

    return FusionConfig(cache_backend="memory")


@pytest.fixture
def memory_repo():
    from hazardfusion.io.repository import InMemoryRepository

    return InMemoryRepository()


@pytest.fixture
def memory_cache():
    from hazardfusion.cache.backends import MemoryCache

    return MemoryCache()


@pytest.fixture
def cache_invalidator(memory_cache, fusion_config):
    from hazardfusion.cache.invalidator import CacheInvalidator

    return CacheInvalidator(memory_cache, fusion_config)


@pytest.fixture
def orchestrator(memory_repo, cache_invalidator, fusion_config):
    from hazardfusion.pipeline import FusionOrchestrator

    return FusionOrchestrator(memory_repo, cache_invalidator, fusion_config)
