"""
Proximity ranking of DPE certificates around a point.
"""

from dpe_matcher.proximity.haversine import haversine_distance_m, haversine_distances_m
from dpe_matcher.proximity.ranker import (
    ProximityResult,
    find_nearby_certificates,
    rank_by_proximity,
)

__all__ = [
    "ProximityResult",
    "find_nearby_certificates",
    "haversine_distance_m",
    "haversine_distances_m",
    "rank_by_proximity",
]
