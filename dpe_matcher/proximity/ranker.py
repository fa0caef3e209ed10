"""
Proximity Ranker.

Orders a pool of DPE certificates (typically one postal code) by distance
from a target point. Records without coordinates are excluded and reported,
never ranked as "infinitely far".
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

import numpy as np

from dpe_matcher.config import Settings, get_settings
from dpe_matcher.constants import EXCLUDED_NO_COORDINATES
from dpe_matcher.domain.models import CertificateRecord, Coordinate, DistancedCandidate
from dpe_matcher.proximity.haversine import haversine_distances_m
from dpe_matcher.sources.ademe import DpeClient

logger = logging.getLogger(__name__)


@dataclass
class ProximityResult:
    """Pool ranked by distance, plus what could not be ranked."""

    ranked: list[DistancedCandidate] = field(default_factory=list)  # Nearest first
    excluded: list[CertificateRecord] = field(default_factory=list)  # No coordinates
    total: int = 0  # Pool size before exclusion
    exclusion_reason: str = EXCLUDED_NO_COORDINATES

    @property
    def closest(self) -> DistancedCandidate | None:
        return self.ranked[0] if self.ranked else None

    def describe(self) -> str:
        """One-line summary distinguishing "nothing found" from "nothing usable"."""
        if self.total == 0:
            return "0 records returned"
        return f"{self.total} records returned, {len(self.ranked)} had usable coordinates"

    def to_dict(self, limit: int | None = None) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        ranked = self.ranked if limit is None else self.ranked[:limit]
        return {
            "total": self.total,
            "ranked_count": len(self.ranked),
            "ranked": [c.to_dict() for c in ranked],
            "excluded": [
                {"id": r.certificate_id, "reason": self.exclusion_reason} for r in self.excluded
            ],
        }


def rank_by_proximity(
    target: Coordinate,
    pool: list[CertificateRecord],
) -> ProximityResult:
    """
    Rank certificates by great-circle distance from target, nearest first.

    Ties keep input order. Never fails on an empty pool.

    Args:
        target: Query point
        pool: Candidate certificates

    Returns:
        ProximityResult with ranked candidates and excluded records
    """
    located = [r for r in pool if r.coordinate is not None]
    excluded = [r for r in pool if r.coordinate is None]

    if excluded:
        logger.debug(f"{len(excluded)} of {len(pool)} DPE records have no coordinates")

    if not located:
        return ProximityResult(ranked=[], excluded=excluded, total=len(pool))

    lats = np.array([r.coordinate.lat for r in located], dtype=np.float64)
    lons = np.array([r.coordinate.lon for r in located], dtype=np.float64)
    distances = haversine_distances_m(target, lats, lons)

    # Stable sort: equal distances keep pool order
    order = np.argsort(distances, kind="stable")
    ranked = [
        DistancedCandidate(record=located[i], distance_m=float(distances[i])) for i in order
    ]

    return ProximityResult(ranked=ranked, excluded=excluded, total=len(pool))


def find_nearby_certificates(
    postal_code: str,
    target: Coordinate,
    client: DpeClient | None = None,
    settings: Settings | None = None,
) -> ProximityResult:
    """
    Fetch every certificate of a postal code and rank it around target.

    One upstream query, no strategy fan-out.

    Raises:
        UpstreamError: If the ADEME query fails
    """
    settings = settings or get_settings()
    client = client or DpeClient(settings=settings)

    pool = client.search_postal_code(postal_code.strip())
    result = rank_by_proximity(target, pool)
    logger.info(f"Postal code {postal_code}: {result.describe()}")
    return result
