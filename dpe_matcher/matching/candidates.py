"""
Candidate Acquisition Module.

Runs every search strategy concurrently against the ADEME API, isolates
per-strategy failures, and merges the results into a deduplicated pool.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from dpe_matcher.domain.models import CertificateRecord, PropertyDescriptor
from dpe_matcher.errors import AcquisitionError, UpstreamError
from dpe_matcher.matching.strategies import SearchStrategy, build_strategies
from dpe_matcher.sources.ademe import DpeClient
from dpe_matcher.utils.parallel import execute_parallel

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StrategyOutcome:
    """What one strategy contributed to the pool."""

    strategy: SearchStrategy
    record_count: int = 0
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class AcquisitionResult:
    """Deduplicated candidate pool plus per-strategy diagnostics."""

    records: list[CertificateRecord]
    raw_count: int  # Records fetched before deduplication
    outcomes: list[StrategyOutcome] = field(default_factory=list)

    @property
    def failed_strategies(self) -> list[StrategyOutcome]:
        return [o for o in self.outcomes if not o.ok]

    @property
    def duplicate_count(self) -> int:
        return self.raw_count - len(self.records)


def deduplicate_records(
    batches: Iterable[Iterable[CertificateRecord]],
) -> list[CertificateRecord]:
    """
    Merge record batches, keeping the first occurrence of each certificate id.

    Args:
        batches: Record lists, in strategy priority order

    Returns:
        Records in first-seen order; no certificate id appears twice
    """
    seen: dict[str, CertificateRecord] = {}
    for batch in batches:
        for record in batch:
            if record.certificate_id not in seen:
                seen[record.certificate_id] = record
    return list(seen.values())


def acquire_candidates(
    descriptor: PropertyDescriptor,
    client: DpeClient,
    strategies: list[SearchStrategy] | None = None,
    max_workers: int | None = None,
) -> AcquisitionResult:
    """
    Fetch and deduplicate DPE candidates for a property.

    Strategies run concurrently; a failed strategy is logged and contributes
    nothing. An empty pool with at least one successful strategy means
    "nothing found", which is different from every strategy failing.

    Args:
        descriptor: Property being searched for
        client: ADEME client
        strategies: Strategies to run (default: build_strategies(descriptor))
        max_workers: Thread pool size (default: settings.max_workers)

    Returns:
        AcquisitionResult with the deduplicated pool

    Raises:
        AcquisitionError: If every strategy failed
    """
    if strategies is None:
        strategies = build_strategies(descriptor)

    if not strategies:
        return AcquisitionResult(records=[], raw_count=0)

    logger.debug(f"Running {len(strategies)} DPE search strategies for {descriptor.label()}")

    def run_strategy(strategy: SearchStrategy) -> list[CertificateRecord]:
        return client.search(strategy.query, strategy=strategy.name)

    def log_failure(strategy: SearchStrategy, error: Exception) -> None:
        logger.warning(f"DPE strategy {strategy.name} failed: {error}")

    task_outcomes = execute_parallel(
        strategies,
        run_strategy,
        max_workers=max_workers or client.settings.max_workers,
        desc="DPE strategies",
        unit="strategy",
        error_handler=log_failure,
    )

    batches: list[list[CertificateRecord]] = []
    outcomes: list[StrategyOutcome] = []
    errors: list[UpstreamError] = []

    for task in sorted(task_outcomes, key=lambda t: t.item.priority):
        strategy = task.item
        if task.ok:
            records = task.result or []
            batches.append(records)
            outcomes.append(StrategyOutcome(strategy=strategy, record_count=len(records)))
            logger.debug(f"Strategy {strategy.name} returned {len(records)} candidates")
        else:
            error = task.error
            if not isinstance(error, UpstreamError):
                error = UpstreamError(str(error), strategy=strategy.name)
            errors.append(error)
            outcomes.append(StrategyOutcome(strategy=strategy, error=str(error)))

    if len(errors) == len(strategies):
        raise AcquisitionError(errors)

    raw_count = sum(len(batch) for batch in batches)
    records = deduplicate_records(batches)
    logger.info(
        f"Acquired {len(records)} unique DPE candidates "
        f"({raw_count} fetched, {len(errors)}/{len(strategies)} strategies failed)"
    )

    return AcquisitionResult(records=records, raw_count=raw_count, outcomes=outcomes)
