"""
Great-circle distance utilities.

Haversine distance on a sphere of radius 6,371 km. A scalar version for
single pairs and a NumPy version for ranking a whole postal-code pool at once.
"""

import math

import numpy as np
from numpy.typing import NDArray

from dpe_matcher.constants import EARTH_RADIUS_M
from dpe_matcher.domain.models import Coordinate


def haversine_distance_m(a: Coordinate, b: Coordinate, radius_m: float = EARTH_RADIUS_M) -> float:
    """
    Great-circle distance between two points, in meters.

    Args:
        a: First point
        b: Second point
        radius_m: Sphere radius (default: mean Earth radius)

    Returns:
        Non-negative distance; 0.0 when a == b
    """
    lat1 = math.radians(a.lat)
    lat2 = math.radians(b.lat)
    dlat = lat2 - lat1
    dlon = math.radians(b.lon - a.lon)

    h = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    # Rounding can push h a hair outside [0, 1] for antipodal points
    h = min(1.0, max(0.0, h))
    return 2 * radius_m * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def haversine_distances_m(
    origin: Coordinate,
    lats: NDArray[np.float64],
    lons: NDArray[np.float64],
    radius_m: float = EARTH_RADIUS_M,
) -> NDArray[np.float64]:
    """
    Distances from one origin to many points, in meters.

    Args:
        origin: Query point
        lats: Latitudes of the points, in degrees
        lons: Longitudes of the points, in degrees (same length as lats)
        radius_m: Sphere radius (default: mean Earth radius)

    Returns:
        Array of non-negative distances, aligned with the inputs
    """
    lat1 = np.radians(origin.lat)
    lat2 = np.radians(np.asarray(lats, dtype=np.float64))
    dlat = lat2 - lat1
    dlon = np.radians(np.asarray(lons, dtype=np.float64) - origin.lon)

    h = np.sin(dlat / 2) ** 2 + np.cos(lat1) * np.cos(lat2) * np.sin(dlon / 2) ** 2
    h = np.clip(h, 0.0, 1.0)
    return 2 * radius_m * np.arctan2(np.sqrt(h), np.sqrt(1 - h))
