"""Cache keys and invalidation for alert and dashboard reads.

Invalidation is fire-and-forget: a failing cache backend is logged and never
interrupts the fusion cycle that asked for the invalidation. Stale reads expire
on their own through the configured TTLs.
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional

from config.settings import FusionConfig
from hazardfusion.cache.backends import CacheBackend, MemoryCache

logger = logging.getLogger(__name__)


class CacheKeys:
    """Cache key names shared with the read-side API."""

    ACTIVE_ALERTS = "alerts:active"
    RECENT_REPORTS = "reports:recent"
    DASHBOARD = "dashboard:data"
    SYSTEM_STATS = "stats:system"
    ALERT_PREFIX = "alert:"
    REPORT_PREFIX = "report:"

    @classmethod
    def alert(cls, alert_id: str) -> str:
        return f"{cls.ALERT_PREFIX}{alert_id}"

    @classmethod
    def report(cls, report_id: str) -> str:
        return f"{cls.REPORT_PREFIX}{report_id}"


class CacheInvalidator:
    """Reads and invalidates the cached views the fusion cycle affects.

    Args:
        backend: Cache backend; defaults to a private MemoryCache.
        config: Supplies TTLs.
    """

    def __init__(
        self,
        backend: Optional[CacheBackend] = None,
        config: Optional[FusionConfig] = None,
    ) -> None:
        self.backend = backend if backend is not None else MemoryCache()
        self.config = config or FusionConfig()

    def _delete(self, key: str) -> None:
        try:
            self.backend.delete(key)
            logger.debug("Invalidated cache key %s", key)
        except Exception as exc:
            logger.warning("Cache invalidation failed for %s: %s", key, exc)

    def invalidate_active_alerts(self) -> None:
        self._delete(CacheKeys.ACTIVE_ALERTS)

    def invalidate_dashboard_data(self) -> None:
        self._delete(CacheKeys.DASHBOARD)

    def invalidate_recent_reports(self) -> None:
        self._delete(CacheKeys.RECENT_REPORTS)

    def invalidate_alert(self, alert_id: str) -> None:
        self._delete(CacheKeys.alert(alert_id))
        self.invalidate_active_alerts()

    def invalidate_all_alerts(self) -> None:
        try:
            removed = self.backend.delete_prefix(CacheKeys.ALERT_PREFIX)
            logger.debug("Invalidated %d alert cache entries", removed)
        except Exception as exc:
            logger.warning("Cache prefix invalidation failed: %s", exc)
        self.invalidate_active_alerts()

    # ── Read-through helpers ───────────────────────────────────────────────────

    def cache_active_alerts(self, alerts: List[Any]) -> None:
        try:
            self.backend.set(CacheKeys.ACTIVE_ALERTS, alerts, self.config.cache_ttl_alerts)
        except Exception as exc:
            logger.warning("Caching active alerts failed: %s", exc)

    def get_active_alerts(self) -> Optional[List[Any]]:
        try:
            return self.backend.get(CacheKeys.ACTIVE_ALERTS)
        except Exception as exc:
            logger.warning("Reading cached active alerts failed: %s", exc)
            return None

    def cache_alert(self, alert_id: str, data: Any) -> None:
        try:
            self.backend.set(CacheKeys.alert(alert_id), data, self.config.cache_ttl_single_item)
        except Exception as exc:
            logger.warning("Caching alert %s failed: %s", alert_id, exc)

    def cache_recent_reports(self, reports: List[Any]) -> None:
        try:
            self.backend.set(CacheKeys.RECENT_REPORTS, reports, self.config.cache_ttl_reports)
        except Exception as exc:
            logger.warning("Caching recent reports failed: %s", exc)

    def cache_dashboard_data(self, data: Any) -> None:
        try:
            self.backend.set(CacheKeys.DASHBOARD, data, self.config.cache_ttl_dashboard)
        except Exception as exc:
            logger.warning("Caching dashboard data failed: %s", exc)

    def get_dashboard_data(self) -> Optional[Any]:
        try:
            return self.backend.get(CacheKeys.DASHBOARD)
        except Exception as exc:
            logger.warning("Reading cached dashboard data failed: %s", exc)
            return None
