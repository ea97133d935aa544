"""HazardFusion alerts package: alert creation, deduplication and advice."""

from hazardfusion.alerts.factory import AlertFactory, alert_summary
from hazardfusion.alerts.matcher import AlertMatcher
from hazardfusion.alerts.recommendations import generate_recommendations

__all__ = [
    "AlertFactory",
    "AlertMatcher",
    "alert_summary",
    "generate_recommendations",
]
