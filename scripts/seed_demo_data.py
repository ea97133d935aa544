#!/usr/bin/env python3
"""Seed a SQLite database with demo coastal hazard reports.

Creates two corroborated events (a storm surge reported by citizens, social
media and an official feed; coastal flooding reported by citizens) plus a few
isolated reports that should not cluster.

Usage:
    python scripts/seed_demo_data.py --db data/hazardfusion.db
    python scripts/seed_demo_data.py --db data/demo.db --reset
"""

from __future__ import annotations

import argparse
import logging
import sys
import uuid
from datetime import timedelta
from pathlib import Path
from typing import Any, Dict, List

# Ensure project root is on sys.path for consistent import resolution
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

from config.defaults import DB_PATH  # noqa: E402


def _report(
    minutes_ago: int,
    lat: float,
    lon: float,
    source: str,
    text: str,
    hazard: str,
    severity: str,
    confidence: float,
    region: str,
    media: int = 0,
) -> Dict[str, Any]:
    from hazardfusion.utils.date_utils import to_iso, utcnow

    report_id = str(uuid.uuid4())
    return {
        "id": report_id,
        "timestamp": to_iso(utcnow() - timedelta(minutes=minutes_ago)),
        "location": {"latitude": lat, "longitude": lon},
        "source": source,
        "content": {
            "original_text": text,
            "language": "en",
            "media_files": [
                {
                    "id": str(uuid.uuid4()),
                    "file_name": f"{report_id[:8]}_{i}.jpg",
                    "file_path": f"uploads/{report_id[:8]}_{i}.jpg",
                    "file_type": "image",
                    "file_size": 204800,
                    "mime_type": "image/jpeg",
                }
                for i in range(media)
            ],
        },
        "classification": {"hazard_type": hazard, "severity": severity, "confidence": confidence},
        "region": region,
    }


def demo_reports() -> List[Dict[str, Any]]:
    """Demo report dicts in the shape accepted by report_from_dict()."""
    return [
        # Storm surge — three channels within ~2 km and 90 minutes
        _report(90, 37.8080, -122.4177, "citizen", "Water coming over the sea wall at the wharf",
                "storm_surge", "high", 82, "Bay Area", media=2),
        _report(60, 37.8065, -122.4230, "social", "Huge surge at the pier, road closed #storm",
                "storm_surge", "high", 71, "Bay Area", media=1),
        _report(30, 37.8100, -122.4100, "official", "Harbour gauge reports surge 1.2 m above tide",
                "storm_surge", "high", 95, "Bay Area"),
        # Coastal flooding — two citizens a few kilometres apart
        _report(200, 41.7550, -124.2010, "citizen", "Street flooding near the harbour",
                "flooding", "moderate", 66, "North Coast"),
        _report(150, 41.7610, -124.1950, "citizen", "Parking lot under water by the beach",
                "flooding", "moderate", 61, "North Coast", media=1),
        # Isolated reports
        _report(45, 34.0100, -118.4960, "social", "Strong rip current warning flags up",
                "rip_current", "low", 48, "South Bay"),
        _report(600, 36.9600, -122.0250, "citizen", "Cliff edge crumbling on the trail",
                "erosion", "moderate", 55, "Central Coast"),
    ]


def main() -> None:
    """CLI entrypoint — create the database and insert demo reports."""
    parser = argparse.ArgumentParser(
        prog="seed_demo_data",
        description="Seed a HazardFusion SQLite database with demo reports",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--db", type=str, default=DB_PATH, help="SQLite database path")
    parser.add_argument(
        "--reset",
        action="store_true",
        default=False,
        help="Delete an existing database file before seeding",
    )
    args = parser.parse_args()

    from hazardfusion.exceptions import RepositoryError
    from hazardfusion.io.row_mapping import report_from_dict
    from hazardfusion.io.sqlite_repository import SQLiteRepository
    from hazardfusion.utils.logging_utils import configure_logging

    configure_logging()
    logger = logging.getLogger("hazardfusion.seed_demo_data")

    db_path = Path(args.db)
    if args.reset and db_path.exists():
        db_path.unlink()
        logger.info("Removed existing database %s", db_path)

    try:
        with SQLiteRepository(str(db_path)) as repository:
            for data in demo_reports():
                repository.add_report(report_from_dict(data))
    except RepositoryError as exc:
        logger.error("Seeding failed: %s", exc)
        sys.exit(1)

    logger.info("Seeded %d demo reports into %s", len(demo_reports()), db_path)


if __name__ == "__main__":
    main()
