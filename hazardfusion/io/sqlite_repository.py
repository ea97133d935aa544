"""SQLite-backed HazardRepository.

Mirrors the production schema's reports, media_files and alerts tables.
Array and polygon columns are stored as JSON text. Every sqlite3.Error is
re-raised as RepositoryError so callers only ever handle one failure type.
"""

from __future__ import annotations

import logging
import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator, List, Optional

from hazardfusion.exceptions import RepositoryError
from hazardfusion.io.repository import HazardRepository
from hazardfusion.io.row_mapping import (
    alert_to_row,
    media_file_to_row,
    report_to_row,
    row_to_alert,
    row_to_media_file,
    row_to_report,
)
from hazardfusion.models.alerts import Alert, AlertStatus
from hazardfusion.models.reports import MediaFile, Report, ReportStatus
from hazardfusion.utils.date_utils import to_iso, utcnow

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS reports (
    id TEXT PRIMARY KEY,
    timestamp TEXT,
    latitude REAL CHECK (latitude IS NULL OR (latitude >= -90 AND latitude <= 90)),
    longitude REAL CHECK (longitude IS NULL OR (longitude >= -180 AND longitude <= 180)),
    location_accuracy REAL,
    address TEXT,
    region TEXT,
    source_type TEXT NOT NULL CHECK (source_type IN ('citizen', 'social', 'official')),
    original_text TEXT NOT NULL,
    translated_text TEXT,
    language TEXT DEFAULT 'en',
    hazard_type TEXT,
    severity TEXT CHECK (severity IS NULL OR severity IN ('low', 'moderate', 'high')),
    confidence REAL DEFAULT 0 CHECK (confidence >= 0 AND confidence <= 100),
    status TEXT DEFAULT 'pending' CHECK (status IN ('pending', 'verified', 'rejected')),
    ai_summary TEXT,
    device_info TEXT,
    ip_address TEXT,
    user_agent TEXT,
    created_at TEXT,
    updated_at TEXT
);

CREATE TABLE IF NOT EXISTS media_files (
    id TEXT PRIMARY KEY,
    report_id TEXT NOT NULL REFERENCES reports(id) ON DELETE CASCADE,
    file_name TEXT NOT NULL,
    file_path TEXT NOT NULL,
    file_type TEXT NOT NULL,
    file_size INTEGER NOT NULL DEFAULT 0,
    mime_type TEXT,
    metadata TEXT,
    created_at TEXT
);

CREATE TABLE IF NOT EXISTS alerts (
    id TEXT PRIMARY KEY,
    incident_id TEXT,
    timestamp TEXT NOT NULL,
    region_name TEXT NOT NULL,
    region_bounds TEXT,
    affected_population INTEGER DEFAULT 0,
    hazard_type TEXT NOT NULL,
    severity TEXT NOT NULL CHECK (severity IN ('low', 'moderate', 'high')),
    confidence REAL NOT NULL CHECK (confidence >= 0 AND confidence <= 100),
    report_count INTEGER DEFAULT 0,
    source_types TEXT,
    time_window TEXT,
    geographic_spread REAL,
    thresholds_met TEXT,
    reasoning TEXT,
    related_reports TEXT,
    status TEXT DEFAULT 'active'
        CHECK (status IN ('active', 'verified', 'resolved', 'false_alarm')),
    ai_summary TEXT NOT NULL,
    created_at TEXT,
    updated_at TEXT
);

CREATE INDEX IF NOT EXISTS idx_reports_status ON reports(status);
CREATE INDEX IF NOT EXISTS idx_reports_timestamp ON reports(timestamp DESC);
CREATE INDEX IF NOT EXISTS idx_media_report ON media_files(report_id);
CREATE INDEX IF NOT EXISTS idx_alerts_status ON alerts(status);
"""


def _insert_sql(table: str, row: Dict[str, object]) -> str:
    columns = ", ".join(row)
    placeholders = ", ".join(f":{c}" for c in row)
    return f"INSERT INTO {table} ({columns}) VALUES ({placeholders})"


class SQLiteRepository(HazardRepository):
    """HazardRepository over a single SQLite database file.

    One connection is shared across threads and serialised with a lock.

    Args:
        db_path: Database file path, or ":memory:" for a private in-memory DB.
    """

    def __init__(self, db_path: str = ":memory:") -> None:
        self.db_path = db_path
        if db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.RLock()
        try:
            self._conn = sqlite3.connect(db_path, check_same_thread=False)
            self._conn.row_factory = sqlite3.Row
            self._conn.execute("PRAGMA foreign_keys = ON")
            self._conn.executescript(SCHEMA)
        except sqlite3.Error as exc:
            raise RepositoryError(
                f"Cannot open database {db_path}: {exc}", operation="connect"
            ) from exc
        logger.debug("SQLite repository ready at %s", db_path)

    @contextmanager
    def _transaction(self, operation: str, entity_id: Optional[str] = None) -> Iterator[sqlite3.Connection]:
        with self._lock:
            try:
                with self._conn:
                    yield self._conn
            except sqlite3.Error as exc:
                logger.error("SQLite %s failed (%s): %s", operation, entity_id or "-", exc)
                raise RepositoryError(
                    f"{operation} failed: {exc}", operation=operation, entity_id=entity_id
                ) from exc

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    def __enter__(self) -> "SQLiteRepository":
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    # ── Reports ────────────────────────────────────────────────────────────────

    def _media_for(self, conn: sqlite3.Connection, report_ids: List[str]) -> Dict[str, List[MediaFile]]:
        if not report_ids:
            return {}
        placeholders = ", ".join("?" for _ in report_ids)
        rows = conn.execute(
            f"SELECT * FROM media_files WHERE report_id IN ({placeholders}) ORDER BY created_at",
            report_ids,
        ).fetchall()
        media: Dict[str, List[MediaFile]] = {}
        for row in rows:
            media.setdefault(row["report_id"], []).append(row_to_media_file(row))
        return media

    def add_report(self, report: Report) -> Report:
        row = report_to_row(report)
        now = to_iso(utcnow())
        row["created_at"] = row["created_at"] or now
        row["updated_at"] = row["updated_at"] or now
        with self._transaction("add_report", report.id) as conn:
            conn.execute(_insert_sql("reports", row), row)
            for media in report.content.media_files:
                media_row = media_file_to_row(media, report.id)
                media_row["created_at"] = media_row["created_at"] or now
                conn.execute(_insert_sql("media_files", media_row), media_row)
        return self.get_report(report.id)  # type: ignore[return-value]

    def get_report(self, report_id: str) -> Optional[Report]:
        with self._transaction("get_report", report_id) as conn:
            row = conn.execute("SELECT * FROM reports WHERE id = ?", (report_id,)).fetchone()
            if row is None:
                return None
            media = self._media_for(conn, [report_id])
        return row_to_report(row, media.get(report_id, []))

    def get_recent_reports(self, limit: int) -> List[Report]:
        with self._transaction("get_recent_reports") as conn:
            rows = conn.execute(
                "SELECT * FROM reports ORDER BY timestamp DESC LIMIT ?", (limit,)
            ).fetchall()
            media = self._media_for(conn, [r["id"] for r in rows])
        return [row_to_report(r, media.get(r["id"], [])) for r in rows]

    def update_report_status(self, report_id: str, status: str) -> Optional[Report]:
        if status not in ReportStatus.ALL:
            raise RepositoryError(
                f"Unknown report status {status!r}",
                operation="update_report_status",
                entity_id=report_id,
            )
        with self._transaction("update_report_status", report_id) as conn:
            cursor = conn.execute(
                "UPDATE reports SET status = ?, updated_at = ? WHERE id = ?",
                (status, to_iso(utcnow()), report_id),
            )
            if cursor.rowcount == 0:
                return None
        return self.get_report(report_id)

    # ── Alerts ─────────────────────────────────────────────────────────────────

    def get_alert(self, alert_id: str) -> Optional[Alert]:
        with self._transaction("get_alert", alert_id) as conn:
            row = conn.execute("SELECT * FROM alerts WHERE id = ?", (alert_id,)).fetchone()
        return row_to_alert(row) if row else None

    def get_active_alerts(self) -> List[Alert]:
        with self._transaction("get_active_alerts") as conn:
            rows = conn.execute(
                "SELECT * FROM alerts WHERE status = ? ORDER BY timestamp DESC",
                (AlertStatus.ACTIVE,),
            ).fetchall()
        return [row_to_alert(r) for r in rows]

    def create_alert(self, alert: Alert) -> Alert:
        row = alert_to_row(alert)
        now = to_iso(utcnow())
        row["created_at"] = row["created_at"] or now
        row["updated_at"] = now
        with self._transaction("create_alert", alert.id) as conn:
            conn.execute(_insert_sql("alerts", row), row)
        logger.debug("Stored alert %s", alert.id)
        return self.get_alert(alert.id)  # type: ignore[return-value]

    def update_alert(self, alert: Alert) -> Alert:
        row = alert_to_row(alert)
        with self._transaction("update_alert", alert.id) as conn:
            cursor = conn.execute(
                """
                UPDATE alerts
                   SET related_reports = :related_reports,
                       confidence = :confidence,
                       severity = :severity,
                       report_count = :report_count,
                       source_types = :source_types,
                       time_window = :time_window,
                       reasoning = :reasoning,
                       updated_at = :updated_at
                 WHERE id = :id
                """,
                {**row, "updated_at": to_iso(utcnow())},
            )
            if cursor.rowcount == 0:
                raise RepositoryError(
                    f"Alert {alert.id} not found", operation="update_alert", entity_id=alert.id
                )
        return self.get_alert(alert.id)  # type: ignore[return-value]

    def update_alert_status(self, alert_id: str, status: str) -> Optional[Alert]:
        if status not in AlertStatus.ALL:
            raise RepositoryError(
                f"Unknown alert status {status!r}",
                operation="update_alert_status",
                entity_id=alert_id,
            )
        with self._transaction("update_alert_status", alert_id) as conn:
            cursor = conn.execute(
                "UPDATE alerts SET status = ?, updated_at = ? WHERE id = ?",
                (status, to_iso(utcnow()), alert_id),
            )
            if cursor.rowcount == 0:
                return None
        return self.get_alert(alert_id)
