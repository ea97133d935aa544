"""Exception taxonomy for HazardFusion.

RepositoryError is fatal to a fusion cycle and always propagates to the caller.
MalformedReportError marks a single report as unusable; the orchestrator logs it
and leaves the report pending. ConfigurationError is defined next to the config
validation that raises it and re-exported here.
"""

from __future__ import annotations

from typing import List, Optional

from config.settings import ConfigurationError

__all__ = [
    "HazardFusionError",
    "RepositoryError",
    "MalformedReportError",
    "ConfigurationError",
    "BroadcastError",
]


class HazardFusionError(Exception):
    """Base class for all HazardFusion errors."""


class RepositoryError(HazardFusionError):
    """A persistence operation against the report/alert store failed."""

    def __init__(self, message: str, operation: str = "", entity_id: Optional[str] = None):
        super().__init__(message)
        self.operation = operation
        self.entity_id = entity_id


class MalformedReportError(HazardFusionError):
    """A report is missing the geolocation or timestamp required for clustering."""

    def __init__(self, report_id: str, problems: List[str]):
        super().__init__(f"Report {report_id} is malformed: {'; '.join(problems)}")
        self.report_id = report_id
        self.problems = problems


class BroadcastError(HazardFusionError):
    """Delivering an alert notification to a subscriber failed."""

    def __init__(self, message: str, url: str = "", status_code: Optional[int] = None):
        super().__init__(message)
        self.url = url
        self.status_code = status_code
