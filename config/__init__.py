"""HazardFusion configuration package."""

from config.defaults import (
    FETCH_LIMIT,
    MATCH_WINDOW_HOURS,
    MIN_CLUSTER_SIZE,
    MIN_CONFIDENCE_FOR_ALERT,
    SPATIAL_RADIUS_KM,
    TEMPORAL_WINDOW_HOURS,
)
from config.settings import ConfigurationError, FusionConfig, ScoringWeights

__all__ = [
    "FusionConfig",
    "ScoringWeights",
    "ConfigurationError",
    "SPATIAL_RADIUS_KM",
    "TEMPORAL_WINDOW_HOURS",
    "MIN_CLUSTER_SIZE",
    "MIN_CONFIDENCE_FOR_ALERT",
    "MATCH_WINDOW_HOURS",
    "FETCH_LIMIT",
]
