"""
DPE Matcher - match energy-performance certificates to cadastral properties.

This package provides:
- Exactness classification: THE certificate for a property, or ranked candidates
- Proximity ranking: certificates of a postal code ordered by distance
- An ADEME API client with a single normalization boundary
- CLI entry points for both operations
"""

import logging

# Set up NullHandler to prevent "No handler found" warnings
# when used as a library. Applications should configure their own handlers.
logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"

# Re-export commonly used items
from dpe_matcher.domain.models import (  # noqa: E402
    CertificateRecord,
    Coordinate,
    DistancedCandidate,
    PropertyDescriptor,
    ScoredCandidate,
)
from dpe_matcher.errors import (  # noqa: E402
    AcquisitionError,
    DpeMatcherError,
    PreconditionError,
    UpstreamError,
)
from dpe_matcher.matching.classifier import (  # noqa: E402
    ClassificationResult,
    classify_candidates,
    classify_exact_match,
)
from dpe_matcher.proximity.ranker import (  # noqa: E402
    ProximityResult,
    find_nearby_certificates,
    rank_by_proximity,
)
from dpe_matcher.sources.ademe import DpeClient  # noqa: E402

__all__ = [
    "__version__",
    # Models
    "CertificateRecord",
    "Coordinate",
    "DistancedCandidate",
    "PropertyDescriptor",
    "ScoredCandidate",
    # Errors
    "AcquisitionError",
    "DpeMatcherError",
    "PreconditionError",
    "UpstreamError",
    # Entry points
    "ClassificationResult",
    "ProximityResult",
    "classify_candidates",
    "classify_exact_match",
    "find_nearby_certificates",
    "rank_by_proximity",
    "DpeClient",
]
