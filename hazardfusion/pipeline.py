"""HazardFusion fusion cycle orchestrator.

Runs one fusion cycle end to end and owns its state machine:

  IDLE → FETCHING → CLUSTERING → PROCESSING → INVALIDATING → DONE
                                     └──────────→ FAILED

  FETCHING      — load recent reports, keep pending ones, drop malformed ones
  CLUSTERING    — group related reports (ClusterEngine)
  PROCESSING    — gate on confidence, merge into a matching active alert or
                  create a new one, persist, mark member reports verified
  INVALIDATING  — drop the cached active-alert and dashboard views

Only one cycle runs at a time per orchestrator. Any RepositoryError aborts the
cycle and propagates to the caller. Subscriber delivery is left to the caller:
the returned FusionResult lists the new and updated alerts.

Usage:
    from hazardfusion.broadcast import AlertBroadcaster
    from hazardfusion.io.sqlite_repository import SQLiteRepository
    from hazardfusion.pipeline import FusionOrchestrator

    orchestrator = FusionOrchestrator(SQLiteRepository("data/hazardfusion.db"))
    result = orchestrator.run_fusion_cycle()
    AlertBroadcaster(subscriptions).broadcast(result)
"""

from __future__ import annotations

import logging
import threading
import uuid
from typing import List, Optional, Sequence

from config.settings import FusionConfig
from hazardfusion.alerts.factory import AlertFactory
from hazardfusion.alerts.matcher import AlertMatcher
from hazardfusion.analysis.cluster_engine import ClusterEngine
from hazardfusion.cache.invalidator import CacheInvalidator
from hazardfusion.exceptions import MalformedReportError, RepositoryError
from hazardfusion.io.repository import HazardRepository
from hazardfusion.models.alerts import Alert
from hazardfusion.models.fusion import CycleState, FusionResult, ReportCluster
from hazardfusion.models.reports import Report, ReportStatus
from hazardfusion.utils.date_utils import utcnow
from hazardfusion.utils.logging_utils import CycleContextAdapter, get_cycle_logger

logger = logging.getLogger(__name__)


def _make_cycle_id() -> str:
    """Sortable cycle id: ``YYYYMMDD_HHMMSS_<6 hex chars>``."""
    return f"{utcnow().strftime('%Y%m%d_%H%M%S')}_{uuid.uuid4().hex[:6]}"


def _replace_by_id(alerts: List[Alert], alert: Alert) -> bool:
    for index, existing in enumerate(alerts):
        if existing.id == alert.id:
            alerts[index] = alert
            return True
    return False


class FusionOrchestrator:
    """Coordinates clustering, scoring, alert matching and persistence.

    Args:
        repository: Report and alert storage.
        cache_invalidator: Cache views to invalidate after a cycle; a private
            in-memory one is used when omitted.
        config: Fusion configuration; validated on construction.

    Raises:
        ConfigurationError: When ``config`` holds inconsistent thresholds.
    """

    def __init__(
        self,
        repository: HazardRepository,
        cache_invalidator: Optional[CacheInvalidator] = None,
        config: Optional[FusionConfig] = None,
    ) -> None:
        self.config = config or FusionConfig()
        self.config.validate()

        self.repository = repository
        self.cache_invalidator = cache_invalidator or CacheInvalidator(config=self.config)

        self.cluster_engine = ClusterEngine(self.config)
        self.matcher = AlertMatcher(self.config)
        self.factory = AlertFactory(self.config)

        self.state: str = CycleState.IDLE
        self.last_result: Optional[FusionResult] = None
        self._cycle_lock = threading.Lock()

    # ── Public API ─────────────────────────────────────────────────────────────

    def process_reports(self, reports: Sequence[Report]) -> FusionResult:
        """Run a cycle over an explicit batch of reports, waiting for any cycle in flight.

        The reports must already be stored in the repository: verifying a
        report that the repository does not know raises RepositoryError.
        """
        return self.run_fusion_cycle(reports=reports)  # type: ignore[return-value]

    def run_fusion_cycle(
        self,
        reports: Optional[Sequence[Report]] = None,
        blocking: bool = True,
    ) -> Optional[FusionResult]:
        """Run one fusion cycle.

        Args:
            reports: Reports to fuse; fetched from the repository when None.
            blocking: Wait for a cycle already in flight. When False and a
                cycle is running, return None immediately.

        Returns:
            FusionResult, or None when skipped because a cycle was running.

        Raises:
            RepositoryError: A storage operation failed; the cycle is aborted.
        """
        if not self._cycle_lock.acquire(blocking=blocking):
            logger.info("Fusion cycle already in progress — skipping this trigger")
            return None
        try:
            return self._run_cycle(reports)
        finally:
            self._cycle_lock.release()

    @property
    def is_running(self) -> bool:
        return self._cycle_lock.locked()

    # ── Cycle ──────────────────────────────────────────────────────────────────

    def _set_state(self, result: FusionResult, state: str, log: CycleContextAdapter) -> None:
        log.debug("State %s → %s", self.state, state)
        self.state = state
        result.state = state

    def _run_cycle(self, reports: Optional[Sequence[Report]]) -> FusionResult:
        result = FusionResult(cycle_id=_make_cycle_id())
        self.last_result = result
        log = get_cycle_logger("pipeline", result.cycle_id)

        self._set_state(result, CycleState.FETCHING, log)
        try:
            if reports is None:
                reports = self.repository.get_recent_reports(self.config.fetch_limit)
        except RepositoryError:
            self._set_state(result, CycleState.FAILED, log)
            log.exception("Fetching recent reports failed")
            raise

        pending = [r for r in reports if r.is_pending]
        usable = self._drop_malformed(pending, result, log)
        if not usable:
            log.info("No pending reports to fuse (%d fetched)", len(reports))
            self._set_state(result, CycleState.DONE, log)
            return result

        self._set_state(result, CycleState.CLUSTERING, log)
        result.clusters = self.cluster_engine.cluster(usable)

        self._set_state(result, CycleState.PROCESSING, log)
        persisted_any = False
        try:
            active_alerts = list(self.repository.get_active_alerts())
            for cluster in result.clusters:
                if cluster.confidence < self.config.min_confidence_for_alert:
                    log.info(
                        "Cluster %s below alert threshold (%.2f < %.2f) — reports stay pending",
                        cluster.id, cluster.confidence, self.config.min_confidence_for_alert,
                    )
                    result.skipped_cluster_ids.append(cluster.id)
                    continue

                self._escalate(cluster, active_alerts, result, log)
                persisted_any = True
                self._mark_verified(cluster, result)
        except RepositoryError as exc:
            self._set_state(result, CycleState.FAILED, log)
            log.error(
                "Cycle aborted: %s failed for %s: %s",
                exc.operation or "repository", exc.entity_id or "-", exc,
            )
            if persisted_any:
                self._invalidate(log)
            raise

        self._set_state(result, CycleState.INVALIDATING, log)
        self._invalidate(log)

        self._set_state(result, CycleState.DONE, log)
        log.info(
            "Cycle complete: %d clusters, %d new alerts, %d updated alerts, "
            "%d reports verified, %d clusters skipped, %d malformed reports",
            len(result.clusters), len(result.new_alerts), len(result.updated_alerts),
            len(result.processed_report_ids), len(result.skipped_cluster_ids),
            len(result.malformed_report_ids),
        )

        return result

    def _drop_malformed(
        self,
        reports: Sequence[Report],
        result: FusionResult,
        log: CycleContextAdapter,
    ) -> List[Report]:
        usable: List[Report] = []
        for report in reports:
            problems = report.missing_fields()
            if problems:
                log.warning("%s — left pending", MalformedReportError(report.id, problems))
                result.malformed_report_ids.append(report.id)
                continue
            usable.append(report)
        return usable

    def _escalate(
        self,
        cluster: ReportCluster,
        active_alerts: List[Alert],
        result: FusionResult,
        log: CycleContextAdapter,
    ) -> Alert:
        """Merge the cluster into its matching alert, or create a new one."""
        match = self.matcher.find_match(cluster, active_alerts)
        if match is not None:
            stored = self.repository.update_alert(self.matcher.merge(match, cluster))
            _replace_by_id(active_alerts, stored)
            # An alert raised earlier in this cycle is still reported as new
            if not _replace_by_id(result.new_alerts, stored):
                if not _replace_by_id(result.updated_alerts, stored):
                    result.updated_alerts.append(stored)
            log.info("Cluster %s merged into alert %s", cluster.id, stored.id)
            return stored

        stored = self.repository.create_alert(self.factory.create(cluster))
        active_alerts.append(stored)
        result.new_alerts.append(stored)
        log.info("Cluster %s raised alert %s", cluster.id, stored.id)
        return stored

    def _mark_verified(self, cluster: ReportCluster, result: FusionResult) -> None:
        """Mark every member verified, or none of them.

        On failure, members already marked are returned to pending before the
        error propagates, so the whole cluster is retried next cycle.
        """
        marked: List[str] = []
        try:
            for report in cluster.reports:
                updated = self.repository.update_report_status(report.id, ReportStatus.VERIFIED)
                if updated is None:
                    raise RepositoryError(
                        f"Report {report.id} disappeared before it could be verified",
                        operation="update_report_status",
                        entity_id=report.id,
                    )
                marked.append(report.id)
        except RepositoryError:
            for report_id in marked:
                try:
                    self.repository.update_report_status(report_id, ReportStatus.PENDING)
                except RepositoryError as exc:
                    logger.error("Could not return report %s to pending: %s", report_id, exc)
            raise
        result.processed_report_ids.extend(marked)

    def _invalidate(self, log: CycleContextAdapter) -> None:
        self.cache_invalidator.invalidate_active_alerts()
        self.cache_invalidator.invalidate_dashboard_data()
        log.debug("Active-alert and dashboard caches invalidated")


def run_fusion(
    repository: HazardRepository,
    config: Optional[FusionConfig] = None,
    cache_invalidator: Optional[CacheInvalidator] = None,
) -> FusionResult:
    """Convenience entry point: build an orchestrator and run a single cycle."""
    orchestrator = FusionOrchestrator(repository, cache_invalidator, config)
    return orchestrator.run_fusion_cycle()  # type: ignore[return-value]
