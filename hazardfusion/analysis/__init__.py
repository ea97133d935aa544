"""HazardFusion analysis package.

Pure analytical functions only — no I/O, no storage, no side effects.
All functions operate on typed models from hazardfusion.models.
"""

from hazardfusion.analysis.cluster_engine import ClusterEngine
from hazardfusion.analysis.confidence_scorer import (
    ConfidenceScorer,
    calculate_alert_priority,
    calculate_confidence_score,
    determine_severity,
    rank_alerts,
)

__all__ = [
    "ClusterEngine",
    "ConfidenceScorer",
    "calculate_confidence_score",
    "determine_severity",
    "calculate_alert_priority",
    "rank_alerts",
]
