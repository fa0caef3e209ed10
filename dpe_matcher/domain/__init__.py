"""
Domain models for DPE matching.
"""

from dpe_matcher.domain.models import (
    CertificateRecord,
    Coordinate,
    DistancedCandidate,
    PropertyDescriptor,
    ScoredCandidate,
)

__all__ = [
    "CertificateRecord",
    "Coordinate",
    "DistancedCandidate",
    "PropertyDescriptor",
    "ScoredCandidate",
]
