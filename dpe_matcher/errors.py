"""
Exception hierarchy for dpe_matcher.

Data-quality gaps (missing commune, missing coordinates) are never raised;
they surface as disqualification or exclusion reasons on the results.
"""

from __future__ import annotations


class DpeMatcherError(Exception):
    """Base class for all dpe_matcher errors."""


class PreconditionError(DpeMatcherError):
    """The query cannot proceed; raised before any network call."""


class UpstreamError(DpeMatcherError):
    """A single call to the ADEME API failed (network, timeout, status, payload)."""

    def __init__(
        self,
        message: str,
        strategy: str | None = None,
        status_code: int | None = None,
    ):
        super().__init__(message)
        self.strategy = strategy
        self.status_code = status_code


class AcquisitionError(DpeMatcherError):
    """Every search strategy failed, so there is no candidate pool to score."""

    def __init__(self, errors: list[UpstreamError]):
        self.errors = errors
        details = "; ".join(f"{e.strategy or 'unknown'}: {e}" for e in errors)
        super().__init__(f"All {len(errors)} DPE search strategies failed ({details})")
