"""HazardFusion — All default threshold values and configuration constants.

All tuneable values live here. Never hard-code magic numbers in source files.
Import constants from this module; override via FusionConfig at runtime.
"""

# ── Clustering ─────────────────────────────────────────────────────────────────
# Reports within this great-circle distance may belong to the same cluster
SPATIAL_RADIUS_KM: float = 10.0

# Reports within this many hours of each other may belong to the same cluster
TEMPORAL_WINDOW_HOURS: float = 24.0

# Minimum number of reports (seed + neighbours) required to form a cluster
MIN_CLUSTER_SIZE: int = 2

# Mean Earth radius used by the haversine formula
EARTH_RADIUS_KM: float = 6371.0

# ── Alert gating and matching ──────────────────────────────────────────────────
# Clusters scoring below this confidence are skipped for the cycle
MIN_CONFIDENCE_FOR_ALERT: float = 40.0

# An active alert within this many hours of a cluster's start time can absorb it
MATCH_WINDOW_HOURS: float = 48.0

# Half-width in degrees of the square drawn around a new alert's centroid
BBOX_HALF_SIZE_DEG: float = 0.1

# Thresholds recorded on every escalated alert
THRESHOLDS_MET: tuple = ("minimum_reports", "confidence_threshold")

# ── Severity ───────────────────────────────────────────────────────────────────
# An explicit "high" report escalates the cluster only above this confidence
HIGH_SEVERITY_CONFIDENCE_THRESHOLD: float = 60.0

# Confidence bands used when no report specifies severity
SEVERITY_HIGH_BAND: float = 80.0
SEVERITY_MODERATE_BAND: float = 50.0

# ── Confidence scoring weights (must sum to 1.0) ───────────────────────────────
WEIGHT_SOURCE_COUNT: float = 0.20
WEIGHT_SOURCE_DIVERSITY: float = 0.20
WEIGHT_TEMPORAL_CONSISTENCY: float = 0.15
WEIGHT_SPATIAL_CONSISTENCY: float = 0.15
WEIGHT_MEDIA_EVIDENCE: float = 0.15
WEIGHT_AI_CONFIDENCE: float = 0.15

# Per-source reliability used by the source diversity factor
SOURCE_RELIABILITY: dict = {
    "citizen": 0.6,
    "social": 0.5,
    "official": 1.0,
}

# Reliability assumed for a source type missing from SOURCE_RELIABILITY
DEFAULT_SOURCE_RELIABILITY: float = 0.5

# Score assigned to consistency factors when a single report is scored
NEUTRAL_FACTOR_SCORE: float = 50.0

# Exponential decay of temporal consistency: peak at zero spread, floor for wide spreads
TEMPORAL_PEAK_SCORE: float = 95.0
TEMPORAL_FLOOR_SCORE: float = 40.0
TEMPORAL_DECAY_HOURS: float = 8.0

# Exponential decay of spatial consistency over mean distance from the centroid
SPATIAL_PEAK_SCORE: float = 95.0
SPATIAL_FLOOR_SCORE: float = 40.0
SPATIAL_DECAY_KM: float = 5.0

# ── Fusion cycle ───────────────────────────────────────────────────────────────
# Maximum number of recent reports fetched per cycle (backlog cap)
FETCH_LIMIT: int = 100

# ── Cache ──────────────────────────────────────────────────────────────────────
# Cache backend: "memory" (in-process expiring map) or "redis"
CACHE_BACKEND: str = "memory"
REDIS_URL: str = "redis://localhost:6379/0"

# TTL values in seconds
CACHE_TTL_ALERTS: int = 60
CACHE_TTL_REPORTS: int = 120
CACHE_TTL_DASHBOARD: int = 30
CACHE_TTL_SINGLE_ITEM: int = 300

# ── Broadcast ──────────────────────────────────────────────────────────────────
WEBHOOK_REQUEST_TIMEOUT: int = 10
WEBHOOK_MAX_RETRIES: int = 3
WEBHOOK_BACKOFF_BASE: float = 0.5

# ── Storage and output paths ───────────────────────────────────────────────────
DB_PATH: str = "data/hazardfusion.db"
OUTPUT_ROOT: str = "outputs/cycles"

# ── Logging ────────────────────────────────────────────────────────────────────
DEFAULT_LOG_LEVEL: str = "INFO"
