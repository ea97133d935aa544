"""Geographic utility functions for HazardFusion.

Pure geographic computations — no I/O, no external calls.
"""

from __future__ import annotations

import math
from typing import List, Optional, Sequence, Tuple

from config.defaults import EARTH_RADIUS_KM


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Calculate the great-circle distance between two points using the Haversine formula.

    Args:
        lat1: Latitude of first point in decimal degrees.
        lon1: Longitude of first point in decimal degrees.
        lat2: Latitude of second point in decimal degrees.
        lon2: Longitude of second point in decimal degrees.

    Returns:
        Distance in kilometres.
    """
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = (
        math.sin(d_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def centroid(points: Sequence[Tuple[float, float]]) -> Optional[Tuple[float, float]]:
    """Arithmetic mean of (lat, lon) pairs.

    Not geodesically exact: fine for clusters a few kilometres wide, wrong for
    points straddling the antimeridian.

    Args:
        points: Sequence of (lat, lon) tuples.

    Returns:
        (lat, lon) tuple, or None for an empty sequence.
    """
    if not points:
        return None
    lat = sum(p[0] for p in points) / len(points)
    lon = sum(p[1] for p in points) / len(points)
    return lat, lon


def mean_distance_from_centroid_km(points: Sequence[Tuple[float, float]]) -> float:
    """Average haversine distance of each point from the arithmetic centroid.

    Returns:
        Mean distance in kilometres; 0.0 for fewer than two points.
    """
    if len(points) < 2:
        return 0.0
    c_lat, c_lon = centroid(points)  # type: ignore[misc]
    distances = [haversine_km(lat, lon, c_lat, c_lon) for lat, lon in points]
    return sum(distances) / len(distances)


def bounding_square(lat: float, lon: float, half_size_deg: float) -> List[List[List[float]]]:
    """Closed GeoJSON ring for a square of ±half_size_deg around a point.

    This is a display approximation, not a containment shape: degrees of
    longitude shrink toward the poles, so the square is not equal-area and does
    not follow the coastline.

    Args:
        lat: Centre latitude.
        lon: Centre longitude.
        half_size_deg: Half of the square's side, in degrees.

    Returns:
        Polygon coordinates as [[[lon, lat], ...]] with the first vertex repeated.
    """
    d = half_size_deg
    return [[
        [lon - d, lat - d],
        [lon + d, lat - d],
        [lon + d, lat + d],
        [lon - d, lat + d],
        [lon - d, lat - d],
    ]]

