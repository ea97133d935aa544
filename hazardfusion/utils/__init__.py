"""HazardFusion utilities package.

All utilities are stateless functions with no external calls or side effects,
apart from logging configuration.
"""

from hazardfusion.utils.date_utils import (
    format_time_window,
    hours_between,
    parse_timestamp,
    to_iso,
    utcnow,
)
from hazardfusion.utils.geo_utils import (
    bounding_square,
    centroid,
    haversine_km,
    mean_distance_from_centroid_km,
)
from hazardfusion.utils.logging_utils import configure_logging, get_cycle_logger, get_logger

__all__ = [
    "utcnow",
    "parse_timestamp",
    "hours_between",
    "format_time_window",
    "to_iso",
    "haversine_km",
    "centroid",
    "mean_distance_from_centroid_km",
    "bounding_square",
    "configure_logging",
    "get_logger",
    "get_cycle_logger",
]
