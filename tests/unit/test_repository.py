"""Unit tests for hazardfusion.io.repository and hazardfusion.io.sqlite_repository.

Both implementations run against the same contract tests.

Covers:
- Reports: add/get, newest-first recent listing with limit, status updates
- Alerts: create/get, active listing, update_alert merge fields, status updates
- Errors: unknown statuses, duplicate ids, missing alerts, sqlite failures wrapped
- Isolation: callers cannot mutate stored state
"""

from __future__ import annotations

import sqlite3
from unittest.mock import MagicMock

import pytest

from hazardfusion.exceptions import RepositoryError
from hazardfusion.io.repository import InMemoryRepository
from hazardfusion.io.sqlite_repository import SQLiteRepository


@pytest.fixture(params=["memory", "sqlite"])
def repo(request, tmp_path):
    if request.param == "memory":
        yield InMemoryRepository()
    else:
        repository = SQLiteRepository(str(tmp_path / "db" / "hazards.db"))
        yield repository
        repository.close()


# ── Reports ───────────────────────────────────────────────────────────────────────

class TestReports:
    def test_add_and_get_report(self, repo, make_report):
        report = make_report("r-1", media=2, severity="high", confidence=82.0)
        repo.add_report(report)

        stored = repo.get_report("r-1")

        assert stored.id == "r-1"
        assert stored.timestamp == report.timestamp
        assert stored.location.latitude == report.location.latitude
        assert stored.classification.severity == "high"
        assert stored.classification.confidence == 82.0
        assert stored.media_count == 2
        assert stored.status == "pending"

    def test_get_missing_report(self, repo):
        assert repo.get_report("missing") is None

    def test_recent_reports_newest_first_with_limit(self, repo, make_report):
        for i, minutes in enumerate([30, 0, 90, 60]):
            repo.add_report(make_report(f"r-{i}", minutes=minutes))

        recent = repo.get_recent_reports(limit=3)

        assert [r.id for r in recent] == ["r-2", "r-3", "r-0"]

    def test_recent_reports_include_all_statuses(self, repo, make_report):
        repo.add_report(make_report("r-1", status="verified"))
        repo.add_report(make_report("r-2", status="pending"))

        assert {r.id for r in repo.get_recent_reports(10)} == {"r-1", "r-2"}

    def test_update_report_status(self, repo, make_report):
        repo.add_report(make_report("r-1"))

        updated = repo.update_report_status("r-1", "verified")

        assert updated.status == "verified"
        assert repo.get_report("r-1").status == "verified"

    def test_update_missing_report_returns_none(self, repo):
        assert repo.update_report_status("missing", "verified") is None

    def test_unknown_report_status_rejected(self, repo, make_report):
        repo.add_report(make_report("r-1"))
        with pytest.raises(RepositoryError) as exc_info:
            repo.update_report_status("r-1", "archived")
        assert exc_info.value.operation == "update_report_status"
        assert exc_info.value.entity_id == "r-1"

    def test_returned_report_is_a_copy(self, repo, make_report):
        repo.add_report(make_report("r-1"))
        fetched = repo.get_report("r-1")
        fetched.status = "rejected"

        assert repo.get_report("r-1").status == "pending"


# ── Alerts ────────────────────────────────────────────────────────────────────────

class TestAlerts:
    def test_create_and_get_alert(self, repo, make_alert):
        alert = make_alert("a-1", hazard="erosion", region="North Coast", confidence=71.5)
        alert.region.bounds.coordinates = [[[72.7, 18.9], [72.9, 18.9], [72.9, 19.1], [72.7, 18.9]]]

        created = repo.create_alert(alert)
        stored = repo.get_alert("a-1")

        assert created.id == "a-1"
        assert stored.hazard_type == "erosion"
        assert stored.region_name == "North Coast"
        assert stored.region.bounds.coordinates == alert.region.bounds.coordinates
        assert stored.confidence == 71.5
        assert stored.related_reports == ["r-old-1", "r-old-2"]
        assert stored.escalation_reason.report_count == 2
        assert stored.created_at is not None

    def test_duplicate_alert_rejected(self, repo, make_alert):
        repo.create_alert(make_alert("a-1"))
        with pytest.raises(RepositoryError):
            repo.create_alert(make_alert("a-1"))

    def test_active_alerts_only_active_newest_first(self, repo, make_alert):
        repo.create_alert(make_alert("old", hours=-5))
        repo.create_alert(make_alert("new", hours=0))
        repo.create_alert(make_alert("closed", hours=1, status="resolved"))

        assert [a.id for a in repo.get_active_alerts()] == ["new", "old"]

    def test_update_alert_persists_merge(self, repo, make_alert):
        repo.create_alert(make_alert("a-1", confidence=55.0))
        merged = make_alert("a-1", confidence=80.0, related=["r-old-1", "r-old-2", "r-9"])

        updated = repo.update_alert(merged)

        assert updated.confidence == 80.0
        assert repo.get_alert("a-1").related_reports == ["r-old-1", "r-old-2", "r-9"]

    def test_update_missing_alert_raises(self, repo, make_alert):
        with pytest.raises(RepositoryError) as exc_info:
            repo.update_alert(make_alert("ghost"))
        assert exc_info.value.entity_id == "ghost"

    def test_update_alert_status(self, repo, make_alert):
        repo.create_alert(make_alert("a-1"))

        assert repo.update_alert_status("a-1", "resolved").status == "resolved"
        assert repo.get_active_alerts() == []

    def test_update_alert_status_missing_returns_none(self, repo):
        assert repo.update_alert_status("missing", "resolved") is None

    def test_unknown_alert_status_rejected(self, repo, make_alert):
        repo.create_alert(make_alert("a-1"))
        with pytest.raises(RepositoryError):
            repo.update_alert_status("a-1", "reopened")


# ── SQLite specifics ──────────────────────────────────────────────────────────────

class TestSQLiteRepository:
    def test_malformed_report_round_trips(self, make_report):
        """Reports without a timestamp or coordinates can still be stored and read back."""
        report = make_report("r-bad")
        report.timestamp = None
        report.location.latitude = None

        with SQLiteRepository() as repo:
            repo.add_report(report)
            stored = repo.get_report("r-bad")

        assert stored.timestamp is None
        assert stored.location.latitude is None
        assert stored.missing_fields() == ["missing timestamp", "missing coordinates"]

    def test_constraint_violation_wrapped(self, make_report):
        with SQLiteRepository() as repo:
            with pytest.raises(RepositoryError) as exc_info:
                repo.add_report(make_report("r-1", source="carrier_pigeon"))

        assert exc_info.value.operation == "add_report"
        assert isinstance(exc_info.value.__cause__, sqlite3.Error)

    def test_failed_insert_rolls_back(self, make_report):
        """A media row that fails must not leave its parent report behind."""
        report = make_report("r-1", media=2)
        report.content.media_files[1].id = report.content.media_files[0].id

        with SQLiteRepository() as repo:
            with pytest.raises(RepositoryError):
                repo.add_report(report)
            assert repo.get_report("r-1") is None

    def test_connection_errors_wrapped(self):
        repo = SQLiteRepository()
        repo._conn = MagicMock()
        repo._conn.__enter__.return_value = repo._conn
        repo._conn.execute.side_effect = sqlite3.OperationalError("database is locked")

        with pytest.raises(RepositoryError, match="database is locked"):
            repo.get_active_alerts()
