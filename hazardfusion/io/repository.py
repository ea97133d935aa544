"""Persistence interface for the fusion core, plus an in-memory implementation.

The fusion core reaches storage only through HazardRepository. Implementations
raise RepositoryError on any storage failure; the orchestrator treats that as
fatal to the running cycle.
"""

from __future__ import annotations

import copy
import logging
import threading
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from hazardfusion.exceptions import RepositoryError
from hazardfusion.models.alerts import Alert, AlertStatus
from hazardfusion.models.reports import Report, ReportStatus
from hazardfusion.utils.date_utils import utcnow

logger = logging.getLogger(__name__)


class HazardRepository(ABC):
    """Storage operations required by the fusion engine."""

    @abstractmethod
    def get_active_alerts(self) -> List[Alert]:
        """All alerts with status active."""

    @abstractmethod
    def get_recent_reports(self, limit: int) -> List[Report]:
        """Up to ``limit`` reports, newest first."""

    @abstractmethod
    def create_alert(self, alert: Alert) -> Alert:
        """Persist a new alert and return the stored copy."""

    @abstractmethod
    def update_alert(self, alert: Alert) -> Alert:
        """Persist the related reports, confidence and severity of an existing alert."""

    @abstractmethod
    def update_alert_status(self, alert_id: str, status: str) -> Optional[Alert]:
        """Change an alert's status; None when the alert does not exist."""

    @abstractmethod
    def update_report_status(self, report_id: str, status: str) -> Optional[Report]:
        """Change a report's status; None when the report does not exist."""


class InMemoryRepository(HazardRepository):
    """Thread-safe dict-backed repository.

    Stored objects are deep-copied on the way in and out, so callers can never
    mutate repository state behind its back.
    """

    def __init__(self) -> None:
        self._reports: Dict[str, Report] = {}
        self._alerts: Dict[str, Alert] = {}
        self._lock = threading.RLock()

    # ── Reports ────────────────────────────────────────────────────────────────

    def add_report(self, report: Report) -> Report:
        with self._lock:
            self._reports[report.id] = copy.deepcopy(report)
            return copy.deepcopy(report)

    def get_report(self, report_id: str) -> Optional[Report]:
        with self._lock:
            report = self._reports.get(report_id)
            return copy.deepcopy(report) if report else None

    def get_recent_reports(self, limit: int) -> List[Report]:
        with self._lock:
            reports = sorted(
                self._reports.values(),
                key=lambda r: r.timestamp.timestamp() if r.timestamp else float("-inf"),
                reverse=True,
            )
            return [copy.deepcopy(r) for r in reports[:limit]]

    def update_report_status(self, report_id: str, status: str) -> Optional[Report]:
        if status not in ReportStatus.ALL:
            raise RepositoryError(
                f"Unknown report status {status!r}",
                operation="update_report_status",
                entity_id=report_id,
            )
        with self._lock:
            report = self._reports.get(report_id)
            if report is None:
                return None
            report.status = status
            report.updated_at = utcnow()
            return copy.deepcopy(report)

    # ── Alerts ─────────────────────────────────────────────────────────────────

    def get_alert(self, alert_id: str) -> Optional[Alert]:
        with self._lock:
            alert = self._alerts.get(alert_id)
            return copy.deepcopy(alert) if alert else None

    def get_active_alerts(self) -> List[Alert]:
        with self._lock:
            active = [a for a in self._alerts.values() if a.status == AlertStatus.ACTIVE]
            active.sort(key=lambda a: a.timestamp, reverse=True)
            return [copy.deepcopy(a) for a in active]

    def create_alert(self, alert: Alert) -> Alert:
        with self._lock:
            if alert.id in self._alerts:
                raise RepositoryError(
                    f"Alert {alert.id} already exists",
                    operation="create_alert",
                    entity_id=alert.id,
                )
            stored = copy.deepcopy(alert)
            now = utcnow()
            stored.created_at = stored.created_at or now
            stored.updated_at = now
            self._alerts[alert.id] = stored
            logger.debug("Stored alert %s", alert.id)
            return copy.deepcopy(stored)

    def update_alert(self, alert: Alert) -> Alert:
        with self._lock:
            stored = self._alerts.get(alert.id)
            if stored is None:
                raise RepositoryError(
                    f"Alert {alert.id} not found",
                    operation="update_alert",
                    entity_id=alert.id,
                )
            stored.related_reports = list(alert.related_reports)
            stored.confidence = alert.confidence
            stored.severity = alert.severity
            stored.escalation_reason = copy.deepcopy(alert.escalation_reason)
            stored.updated_at = utcnow()
            return copy.deepcopy(stored)

    def update_alert_status(self, alert_id: str, status: str) -> Optional[Alert]:
        if status not in AlertStatus.ALL:
            raise RepositoryError(
                f"Unknown alert status {status!r}",
                operation="update_alert_status",
                entity_id=alert_id,
            )
        with self._lock:
            stored = self._alerts.get(alert_id)
            if stored is None:
                return None
            stored.status = status
            stored.updated_at = utcnow()
            return copy.deepcopy(stored)
