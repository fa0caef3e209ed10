"""
DPE Matching Module.

Matches ADEME energy-performance certificates to a cadastral property:
- Search strategies (which queries to send)
- Candidate acquisition (concurrent fan-out and deduplication)
- Exactness scoring (ordered rule chain with hard gates)
- Classification (single exact match, or ranked candidates)

Each component can be tested independently.
"""

from dpe_matcher.matching.candidates import (
    AcquisitionResult,
    StrategyOutcome,
    acquire_candidates,
    deduplicate_records,
)
from dpe_matcher.matching.classifier import (
    ClassificationDiagnostics,
    ClassificationResult,
    classify_candidates,
    classify_exact_match,
)
from dpe_matcher.matching.scoring import (
    RuleBasedScorer,
    ScoringContext,
    ScoringRule,
    ScoringWeights,
)
from dpe_matcher.matching.strategies import SearchStrategy, build_strategies

__all__ = [
    # Strategies
    "SearchStrategy",
    "build_strategies",
    # Acquisition
    "AcquisitionResult",
    "StrategyOutcome",
    "acquire_candidates",
    "deduplicate_records",
    # Scoring
    "RuleBasedScorer",
    "ScoringContext",
    "ScoringRule",
    "ScoringWeights",
    # Classification
    "ClassificationDiagnostics",
    "ClassificationResult",
    "classify_candidates",
    "classify_exact_match",
]
