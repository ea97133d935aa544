"""HazardFusion — FusionConfig and environment-based configuration loading.

All runtime configuration flows through FusionConfig. No module-level globals,
no hard-coded values. Deployment overrides come from environment variables.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Dict, List

from dotenv import load_dotenv

from config.defaults import (
    BBOX_HALF_SIZE_DEG,
    CACHE_BACKEND,
    CACHE_TTL_ALERTS,
    CACHE_TTL_DASHBOARD,
    CACHE_TTL_REPORTS,
    CACHE_TTL_SINGLE_ITEM,
    DB_PATH,
    DEFAULT_LOG_LEVEL,
    DEFAULT_SOURCE_RELIABILITY,
    FETCH_LIMIT,
    HIGH_SEVERITY_CONFIDENCE_THRESHOLD,
    MATCH_WINDOW_HOURS,
    MIN_CLUSTER_SIZE,
    MIN_CONFIDENCE_FOR_ALERT,
    OUTPUT_ROOT,
    REDIS_URL,
    SEVERITY_HIGH_BAND,
    SEVERITY_MODERATE_BAND,
    SOURCE_RELIABILITY,
    SPATIAL_RADIUS_KM,
    TEMPORAL_WINDOW_HOURS,
    THRESHOLDS_MET,
    WEBHOOK_BACKOFF_BASE,
    WEBHOOK_MAX_RETRIES,
    WEBHOOK_REQUEST_TIMEOUT,
    WEIGHT_AI_CONFIDENCE,
    WEIGHT_MEDIA_EVIDENCE,
    WEIGHT_SOURCE_COUNT,
    WEIGHT_SOURCE_DIVERSITY,
    WEIGHT_SPATIAL_CONSISTENCY,
    WEIGHT_TEMPORAL_CONSISTENCY,
)

# Load .env file if present; silently skip if missing
load_dotenv()

_CACHE_BACKENDS = ("memory", "redis")


class ConfigurationError(ValueError):
    """Raised when threshold configuration is invalid. Fatal at startup."""


def _env_int(name: str, default: int) -> int:
    """Read an integer environment override, rejecting non-numeric values."""
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from None


@dataclass
class ScoringWeights:
    """Configurable weights for the six confidence factors."""

    source_count: float = WEIGHT_SOURCE_COUNT
    source_diversity: float = WEIGHT_SOURCE_DIVERSITY
    temporal_consistency: float = WEIGHT_TEMPORAL_CONSISTENCY
    spatial_consistency: float = WEIGHT_SPATIAL_CONSISTENCY
    media_evidence: float = WEIGHT_MEDIA_EVIDENCE
    ai_confidence: float = WEIGHT_AI_CONFIDENCE

    def __post_init__(self) -> None:
        values = self.as_dict()
        negative = [name for name, value in values.items() if value < 0]
        if negative:
            raise ConfigurationError(
                f"ScoringWeights must be non-negative, got negative: {', '.join(negative)}"
            )
        total = sum(values.values())
        if abs(total - 1.0) > 1e-6:
            raise ConfigurationError(f"ScoringWeights must sum to 1.0, got {total:.4f}")

    def as_dict(self) -> Dict[str, float]:
        return {
            "source_count": self.source_count,
            "source_diversity": self.source_diversity,
            "temporal_consistency": self.temporal_consistency,
            "spatial_consistency": self.spatial_consistency,
            "media_evidence": self.media_evidence,
            "ai_confidence": self.ai_confidence,
        }


@dataclass
class FusionConfig:
    """Single configuration object shared by every fusion component.

    All tuneable thresholds, storage paths and cache settings live here.
    Construction validates every threshold and raises ConfigurationError
    on the first inconsistency, so an invalid config never reaches a cycle.
    """

    # ── Clustering ─────────────────────────────────────────────────────────────
    spatial_radius_km: float = SPATIAL_RADIUS_KM
    temporal_window_hours: float = TEMPORAL_WINDOW_HOURS
    min_cluster_size: int = MIN_CLUSTER_SIZE

    # ── Scoring ────────────────────────────────────────────────────────────────
    scoring_weights: ScoringWeights = field(default_factory=ScoringWeights)
    source_reliability: Dict[str, float] = field(
        default_factory=lambda: dict(SOURCE_RELIABILITY)
    )
    default_source_reliability: float = DEFAULT_SOURCE_RELIABILITY

    # ── Severity ───────────────────────────────────────────────────────────────
    high_severity_confidence_threshold: float = HIGH_SEVERITY_CONFIDENCE_THRESHOLD
    severity_high_band: float = SEVERITY_HIGH_BAND
    severity_moderate_band: float = SEVERITY_MODERATE_BAND

    # ── Alert gating and matching ──────────────────────────────────────────────
    min_confidence_for_alert: float = MIN_CONFIDENCE_FOR_ALERT
    match_window_hours: float = MATCH_WINDOW_HOURS
    bbox_half_size_deg: float = BBOX_HALF_SIZE_DEG
    thresholds_met: List[str] = field(default_factory=lambda: list(THRESHOLDS_MET))

    # ── Fusion cycle ───────────────────────────────────────────────────────────
    fetch_limit: int = field(
        default_factory=lambda: _env_int("HAZARDFUSION_FETCH_LIMIT", FETCH_LIMIT)
    )

    # ── Cache ──────────────────────────────────────────────────────────────────
    cache_backend: str = field(
        default_factory=lambda: os.getenv("HAZARDFUSION_CACHE_BACKEND", CACHE_BACKEND)
    )
    redis_url: str = field(
        default_factory=lambda: os.getenv("HAZARDFUSION_REDIS_URL", REDIS_URL)
    )
    cache_ttl_alerts: int = CACHE_TTL_ALERTS
    cache_ttl_reports: int = CACHE_TTL_REPORTS
    cache_ttl_dashboard: int = CACHE_TTL_DASHBOARD
    cache_ttl_single_item: int = CACHE_TTL_SINGLE_ITEM

    # ── Broadcast ──────────────────────────────────────────────────────────────
    webhook_request_timeout: int = WEBHOOK_REQUEST_TIMEOUT
    webhook_max_retries: int = WEBHOOK_MAX_RETRIES
    webhook_backoff_base: float = WEBHOOK_BACKOFF_BASE

    # ── Storage, output and logging ────────────────────────────────────────────
    db_path: str = field(default_factory=lambda: os.getenv("HAZARDFUSION_DB_PATH", DB_PATH))
    output_root: str = field(
        default_factory=lambda: os.getenv("HAZARDFUSION_OUTPUT_ROOT", OUTPUT_ROOT)
    )
    log_level: str = field(
        default_factory=lambda: os.getenv("HAZARDFUSION_LOG_LEVEL", DEFAULT_LOG_LEVEL)
    )

    def __post_init__(self) -> None:
        self.cache_backend = self.cache_backend.lower()
        self.validate()

    def validate(self) -> None:
        """Check every threshold for consistency.

        Raises:
            ConfigurationError: On the first invalid value found.
        """
        positive = {
            "spatial_radius_km": self.spatial_radius_km,
            "temporal_window_hours": self.temporal_window_hours,
            "match_window_hours": self.match_window_hours,
            "bbox_half_size_deg": self.bbox_half_size_deg,
            "fetch_limit": self.fetch_limit,
            "cache_ttl_alerts": self.cache_ttl_alerts,
            "cache_ttl_reports": self.cache_ttl_reports,
            "cache_ttl_dashboard": self.cache_ttl_dashboard,
            "cache_ttl_single_item": self.cache_ttl_single_item,
            "webhook_request_timeout": self.webhook_request_timeout,
        }
        for name, value in positive.items():
            if value <= 0:
                raise ConfigurationError(f"{name} must be positive, got {value}")

        if self.min_cluster_size < 1:
            raise ConfigurationError(
                f"min_cluster_size must be at least 1, got {self.min_cluster_size}"
            )

        percentages = {
            "min_confidence_for_alert": self.min_confidence_for_alert,
            "high_severity_confidence_threshold": self.high_severity_confidence_threshold,
            "severity_high_band": self.severity_high_band,
            "severity_moderate_band": self.severity_moderate_band,
        }
        for name, value in percentages.items():
            if not 0 <= value <= 100:
                raise ConfigurationError(f"{name} must lie in [0, 100], got {value}")

        if self.severity_moderate_band > self.severity_high_band:
            raise ConfigurationError(
                "severity_moderate_band must not exceed severity_high_band "
                f"({self.severity_moderate_band} > {self.severity_high_band})"
            )

        for source, reliability in self.source_reliability.items():
            if reliability < 0:
                raise ConfigurationError(
                    f"source_reliability[{source!r}] must be non-negative, got {reliability}"
                )
        if self.default_source_reliability < 0:
            raise ConfigurationError("default_source_reliability must be non-negative")

        if self.webhook_max_retries < 0:
            raise ConfigurationError("webhook_max_retries must be non-negative")

        if self.cache_backend not in _CACHE_BACKENDS:
            raise ConfigurationError(
                f"cache_backend must be one of {_CACHE_BACKENDS}, got {self.cache_backend!r}"
            )
