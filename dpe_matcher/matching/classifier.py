"""
Exactness Classifier.

Orchestrates the full matching pipeline for one property:
1. Check preconditions (no network call without a department)
2. Acquire and deduplicate candidates
3. Score each candidate with the rule chain, using one captured `now`
4. Decide: a single exact match, or ranked near-matches

Step 3-4 are exposed separately as classify_candidates() for callers that
already hold a candidate pool.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from typing import Any

from dpe_matcher.config import Settings, get_exact_match_threshold, get_settings
from dpe_matcher.domain.models import CertificateRecord, PropertyDescriptor, ScoredCandidate
from dpe_matcher.errors import PreconditionError
from dpe_matcher.matching.candidates import StrategyOutcome, acquire_candidates
from dpe_matcher.matching.scoring import RuleBasedScorer, ScoringContext, ScoringWeights
from dpe_matcher.sources.ademe import DpeClient

logger = logging.getLogger(__name__)


@dataclass
class ClassificationDiagnostics:
    """Counts explaining how the candidate pool was narrowed."""

    qualified: int = 0
    disqualified: int = 0
    disqualification_reasons: dict[str, int] = field(default_factory=dict)
    raw_count: int = 0  # Fetched before deduplication
    strategies: list[StrategyOutcome] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "qualified": self.qualified,
            "disqualified": self.disqualified,
            "disqualification_reasons": dict(self.disqualification_reasons),
            "raw_count": self.raw_count,
            "strategies": [
                {
                    "name": o.strategy.name,
                    "query": o.strategy.query,
                    "records": o.record_count,
                    "error": o.error,
                }
                for o in self.strategies
            ],
        }


@dataclass
class ClassificationResult:
    """
    Outcome of matching one property against DPE certificates.

    `candidates` holds every qualified candidate (score > 0), best first,
    whether or not an exact match was found. Disqualified candidates are
    only counted in `diagnostics`.
    """

    has_exact_match: bool
    match: CertificateRecord | None
    candidates: list[ScoredCandidate]
    candidate_count: int  # Unique candidates scored
    threshold: int
    diagnostics: ClassificationDiagnostics = field(default_factory=ClassificationDiagnostics)

    @property
    def best(self) -> ScoredCandidate | None:
        """Highest-scoring qualified candidate, exact or not."""
        return self.candidates[0] if self.candidates else None

    def to_dict(self, on: date | None = None) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "has_exact_match": self.has_exact_match,
            "match": self.match.to_summary(on) if self.match else None,
            "candidate_count": self.candidate_count,
            "nearby_dpe_count": (
                self.candidate_count - 1 if self.has_exact_match else self.candidate_count
            ),
            "threshold": self.threshold,
            "candidates": [c.to_dict(self.threshold) for c in self.candidates],
            "diagnostics": self.diagnostics.to_dict(),
        }


def _require_department(descriptor: PropertyDescriptor) -> None:
    if not (descriptor.department or "").strip():
        raise PreconditionError(
            "Property descriptor has no department code; cannot classify DPE candidates"
        )


def select_exact_match(
    scored: list[ScoredCandidate],
    threshold: int,
) -> ScoredCandidate | None:
    """
    Pick the single exact match among scored candidates.

    Highest score wins; ties go to the most recently established
    certificate, then to pool order.
    """
    best: ScoredCandidate | None = None
    for candidate in scored:
        if not candidate.qualified or candidate.score < threshold:
            continue
        if best is None:
            best = candidate
            continue
        if candidate.score > best.score:
            best = candidate
        elif candidate.score == best.score:
            candidate_date = candidate.record.established_on or date.min
            best_date = best.record.established_on or date.min
            if candidate_date > best_date:
                best = candidate
    return best


def classify_candidates(
    descriptor: PropertyDescriptor,
    records: list[CertificateRecord],
    now: datetime | None = None,
    weights: ScoringWeights | None = None,
    threshold: int | None = None,
    recency_years: float | None = None,
    scorer: RuleBasedScorer | None = None,
) -> ClassificationResult:
    """
    Score a deduplicated candidate pool and decide on an exact match.

    Pure: no I/O. `now` is captured once (if not given) and shared by all
    candidates, so scores are deterministic within one call.

    Args:
        descriptor: Property being matched (must have a department)
        records: Deduplicated candidate pool
        now: Reference time for the recency rule (default: current UTC time)
        weights: Rule weights (default: ScoringWeights())
        threshold: Minimum score for an exact match (default: settings)
        recency_years: Recency window (default: settings)
        scorer: Scorer to use (default: RuleBasedScorer with default rules)

    Returns:
        ClassificationResult

    Raises:
        PreconditionError: If the descriptor has no department
    """
    _require_department(descriptor)

    if now is None:
        now = datetime.now(UTC)
    if threshold is None:
        threshold = get_exact_match_threshold()
    if recency_years is None:
        recency_years = get_settings().recency_years
    scorer = scorer or RuleBasedScorer()

    context = ScoringContext(
        now=now,
        weights=weights or ScoringWeights(),
        recency_years=recency_years,
    )
    scored = scorer.score_all(descriptor, records, context)

    qualified = [c for c in scored if c.qualified]
    reasons = Counter(c.disqualification for c in scored if c.disqualification)
    # sorted() is stable, so equal scores keep pool order
    ranked = sorted(qualified, key=lambda c: c.score, reverse=True)

    exact = select_exact_match(scored, threshold)
    diagnostics = ClassificationDiagnostics(
        qualified=len(qualified),
        disqualified=len(scored) - len(qualified),
        disqualification_reasons=dict(reasons),
    )

    if exact is not None:
        logger.info(
            f"Exact DPE match for {descriptor.label()}: {exact.certificate_id} "
            f"({exact.score}/100)"
        )
    elif ranked:
        logger.info(
            f"No exact DPE match for {descriptor.label()}; best candidate scored "
            f"{ranked[0].score}/100 ({len(ranked)} qualified of {len(scored)})"
        )
    else:
        logger.info(
            f"No DPE candidate passed department/commune checks for {descriptor.label()} "
            f"({len(scored)} scored)"
        )

    return ClassificationResult(
        has_exact_match=exact is not None,
        match=exact.record if exact else None,
        candidates=ranked,
        candidate_count=len(records),
        threshold=threshold,
        diagnostics=diagnostics,
    )


def classify_exact_match(
    descriptor: PropertyDescriptor,
    client: DpeClient | None = None,
    now: datetime | None = None,
    settings: Settings | None = None,
    weights: ScoringWeights | None = None,
    scorer: RuleBasedScorer | None = None,
) -> ClassificationResult:
    """
    Find THE DPE certificate for a property, or ranked candidates if unsure.

    Args:
        descriptor: Property being matched
        client: ADEME client (default: new DpeClient)
        now: Reference time for the recency rule (default: captured here, once)
        settings: Settings override (default: get_settings())
        weights: Rule weights override
        scorer: Scorer override

    Returns:
        ClassificationResult

    Raises:
        PreconditionError: If the descriptor has no department (no network call made)
        AcquisitionError: If every search strategy failed
    """
    _require_department(descriptor)

    settings = settings or get_settings()
    if now is None:
        now = datetime.now(UTC)
    client = client or DpeClient(settings=settings)

    logger.info(f"Classifying DPE candidates for {descriptor.label()}")
    acquisition = acquire_candidates(descriptor, client, max_workers=settings.max_workers)

    result = classify_candidates(
        descriptor,
        acquisition.records,
        now=now,
        weights=weights,
        threshold=settings.exact_match_threshold,
        recency_years=settings.recency_years,
        scorer=scorer,
    )
    result.diagnostics.raw_count = acquisition.raw_count
    result.diagnostics.strategies = list(acquisition.outcomes)
    return result
