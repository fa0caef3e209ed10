"""
Exactness Scoring Module.

Scores a DPE certificate against a property description with an ordered
chain of rules. Hard gates zero the score and stop the chain on mismatch;
soft rules only add points.

Default rule chain (weights in ScoringWeights):
1. department  - hard gate, 40
2. commune     - hard gate, 40
3. section     - section string found in the address, 10
4. numero      - parcel number found in the address, 10
5. street_number - address contains a street number, 5
6. recency     - certificate established within the recency window, 5
"""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime

from dpe_matcher.constants import (
    DISQUALIFIED_NO_COMMUNE,
    DISQUALIFIED_WRONG_COMMUNE,
    DISQUALIFIED_WRONG_DEPARTMENT,
    MAX_SCORE,
    RECENCY_YEARS,
    WEIGHT_COMMUNE,
    WEIGHT_DEPARTMENT,
    WEIGHT_NUMERO,
    WEIGHT_RECENCY,
    WEIGHT_SECTION,
    WEIGHT_STREET_NUMBER,
)
from dpe_matcher.domain.models import CertificateRecord, PropertyDescriptor, ScoredCandidate
from dpe_matcher.errors import PreconditionError

logger = logging.getLogger(__name__)

DAYS_PER_YEAR = 365.0


@dataclass(frozen=True)
class ScoringWeights:
    """Points awarded by each rule. Heuristic values; tune against real data."""

    department: int = WEIGHT_DEPARTMENT
    commune: int = WEIGHT_COMMUNE
    section: int = WEIGHT_SECTION
    numero: int = WEIGHT_NUMERO
    street_number: int = WEIGHT_STREET_NUMBER
    recency: int = WEIGHT_RECENCY


@dataclass(frozen=True)
class ScoringContext:
    """Per-call inputs shared by every candidate of one classification."""

    now: datetime  # Captured once per call, never re-read per candidate
    weights: ScoringWeights = field(default_factory=ScoringWeights)
    recency_years: float = RECENCY_YEARS


@dataclass
class ScoreAccumulator:
    """Mutable score and trace passed down the rule chain for one candidate."""

    score: int = 0
    breakdown: dict[str, int] = field(default_factory=dict)
    disqualification: str | None = None

    @property
    def disqualified(self) -> bool:
        return self.disqualification is not None

    def award(self, rule: str, points: int) -> None:
        self.score += points
        self.breakdown[rule] = points

    def disqualify(self, reason: str) -> None:
        self.score = 0
        self.disqualification = reason


def _normalize_text(value: str | None) -> str:
    return (value or "").strip().lower()


class ScoringRule(ABC):
    """One link of the scoring chain."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Rule name, used as the breakdown key."""
        ...

    @abstractmethod
    def apply(
        self,
        descriptor: PropertyDescriptor,
        record: CertificateRecord,
        accumulator: ScoreAccumulator,
        context: ScoringContext,
    ) -> None:
        """Award points to, or disqualify, the accumulator."""
        ...


class DepartmentGate(ScoringRule):
    """Hard gate: certificate department must equal the property's."""

    @property
    def name(self) -> str:
        return "department"

    def apply(self, descriptor, record, accumulator, context):
        expected = _normalize_text(descriptor.department)
        if not expected:
            raise PreconditionError("A department code is required to score DPE candidates")
        if _normalize_text(record.department) == expected:
            accumulator.award(self.name, context.weights.department)
        else:
            accumulator.disqualify(DISQUALIFIED_WRONG_DEPARTMENT)


class CommuneGate(ScoringRule):
    """
    Hard gate: commune names must match, ignoring case and outer whitespace.

    Skipped when the property has no commune. A certificate without a
    commune cannot be verified and is disqualified.
    """

    @property
    def name(self) -> str:
        return "commune"

    def apply(self, descriptor, record, accumulator, context):
        expected = _normalize_text(descriptor.commune)
        if not expected:
            return
        actual = _normalize_text(record.commune)
        if not actual:
            accumulator.disqualify(DISQUALIFIED_NO_COMMUNE)
        elif actual == expected:
            accumulator.award(self.name, context.weights.commune)
        else:
            accumulator.disqualify(DISQUALIFIED_WRONG_COMMUNE)


class SectionRule(ScoringRule):
    """Cadastral section appears in the certificate address."""

    @property
    def name(self) -> str:
        return "section"

    def apply(self, descriptor, record, accumulator, context):
        section = _normalize_text(descriptor.section)
        if section and section in _normalize_text(record.address):
            accumulator.award(self.name, context.weights.section)


class ParcelNumberRule(ScoringRule):
    """Parcel number appears in the certificate address (independent of section)."""

    @property
    def name(self) -> str:
        return "numero"

    def apply(self, descriptor, record, accumulator, context):
        numero = _normalize_text(descriptor.numero)
        if numero and numero in _normalize_text(record.address):
            accumulator.award(self.name, context.weights.numero)


class StreetNumberRule(ScoringRule):
    """
    Address contains a street number ("12 rue ...").

    Weak signal that the certificate is tied to a precise address rather
    than a commune-level placeholder.
    """

    PATTERN = re.compile(r"\b\d+\s")

    @property
    def name(self) -> str:
        return "street_number"

    def apply(self, descriptor, record, accumulator, context):
        if record.address and self.PATTERN.search(record.address):
            accumulator.award(self.name, context.weights.street_number)


class RecencyRule(ScoringRule):
    """Certificate established less than `recency_years` before `now`."""

    @property
    def name(self) -> str:
        return "recency"

    def apply(self, descriptor, record, accumulator, context):
        if record.established_on is None:
            return
        age_years = (context.now.date() - record.established_on).days / DAYS_PER_YEAR
        if age_years < context.recency_years:
            accumulator.award(self.name, context.weights.recency)


def default_rules() -> list[ScoringRule]:
    """The standard rule chain, hard gates first."""
    return [
        DepartmentGate(),
        CommuneGate(),
        SectionRule(),
        ParcelNumberRule(),
        StreetNumberRule(),
        RecencyRule(),
    ]


class RuleBasedScorer:
    """
    Runs the rule chain over candidates.

    Rules are applied in order; the chain stops at the first
    disqualification. Final scores are clamped to 0-100.
    """

    def __init__(self, rules: list[ScoringRule] | None = None):
        self.rules = rules if rules is not None else default_rules()

    def score(
        self,
        descriptor: PropertyDescriptor,
        record: CertificateRecord,
        context: ScoringContext,
    ) -> ScoredCandidate:
        """Score one candidate."""
        accumulator = ScoreAccumulator()
        for rule in self.rules:
            rule.apply(descriptor, record, accumulator, context)
            if accumulator.disqualified:
                break

        score = max(0, min(MAX_SCORE, accumulator.score))
        logger.debug(
            f"DPE {record.certificate_id}: score={score} "
            f"breakdown={accumulator.breakdown} disqualified={accumulator.disqualification}"
        )
        return ScoredCandidate(
            record=record,
            score=score,
            breakdown=dict(accumulator.breakdown),
            disqualification=accumulator.disqualification,
        )

    def score_all(
        self,
        descriptor: PropertyDescriptor,
        records: list[CertificateRecord],
        context: ScoringContext,
    ) -> list[ScoredCandidate]:
        """Score every candidate, preserving pool order."""
        return [self.score(descriptor, record, context) for record in records]
