"""Tests for the exactness scoring rule chain."""

from datetime import UTC, date, datetime

import pytest
from factories import make_record

from dpe_matcher.domain.models import PropertyDescriptor
from dpe_matcher.errors import PreconditionError
from dpe_matcher.matching.scoring import (
    CommuneGate,
    DepartmentGate,
    RuleBasedScorer,
    ScoreAccumulator,
    ScoringContext,
    ScoringWeights,
    StreetNumberRule,
)


@pytest.fixture
def context(now) -> ScoringContext:
    return ScoringContext(now=now)


@pytest.fixture
def scorer() -> RuleBasedScorer:
    return RuleBasedScorer()


class TestHardGates:
    """Department and commune gates."""

    def test_wrong_department_is_disqualified(self, scorer, context, paris_descriptor):
        record = make_record(department="33")

        scored = scorer.score(paris_descriptor, record, context)

        assert scored.score == 0
        assert scored.disqualification == "wrong_department"
        assert not scored.qualified

    def test_wrong_department_stops_chain(self, scorer, context, paris_descriptor):
        # Commune, section, numero and street number would all match
        scored = scorer.score(paris_descriptor, make_record(department="33"), context)
        assert scored.breakdown == {}

    def test_wrong_commune_is_disqualified(self, scorer, context, paris_descriptor):
        scored = scorer.score(paris_descriptor, make_record(commune="Lyon"), context)

        assert scored.score == 0
        assert scored.disqualification == "wrong_commune"

    def test_missing_commune_on_candidate_is_disqualified(self, scorer, context, paris_descriptor):
        scored = scorer.score(paris_descriptor, make_record(commune=None), context)

        assert scored.score == 0
        assert scored.disqualification == "no_commune_data"

    def test_commune_match_ignores_case_and_whitespace(self, scorer, context, paris_descriptor):
        scored = scorer.score(paris_descriptor, make_record(commune="  paris "), context)

        assert scored.disqualification is None
        assert scored.breakdown["commune"] == 40

    def test_commune_gate_skipped_without_descriptor_commune(self, scorer, context):
        descriptor = PropertyDescriptor(department="75")

        scored = scorer.score(descriptor, make_record(commune=None), context)

        assert scored.disqualification is None
        assert "commune" not in scored.breakdown
        assert scored.breakdown["department"] == 40

    def test_department_gate_requires_descriptor_department(self, context):
        with pytest.raises(PreconditionError):
            DepartmentGate().apply(
                PropertyDescriptor(commune="Paris"), make_record(), ScoreAccumulator(), context
            )


class TestSoftRules:
    """Section, parcel number, street number and recency bonuses."""

    def test_full_match_scores_capped_at_100(self, scorer, context, paris_descriptor):
        record = make_record(
            commune="paris", address="12 rue AB 001", established_on=date(2024, 6, 1)
        )

        scored = scorer.score(paris_descriptor, record, context)

        assert scored.breakdown == {
            "department": 40,
            "commune": 40,
            "section": 10,
            "numero": 10,
            "street_number": 5,
            "recency": 5,
        }
        assert scored.score == 100

    def test_section_is_case_insensitive(self, scorer, context, paris_descriptor):
        scored = scorer.score(paris_descriptor, make_record(address="lot ab"), context)
        assert scored.breakdown.get("section") == 10

    def test_section_and_numero_are_independent(self, scorer, context, paris_descriptor):
        scored = scorer.score(paris_descriptor, make_record(address="parcelle 001"), context)

        assert "section" not in scored.breakdown
        assert scored.breakdown["numero"] == 10

    def test_street_number_pattern(self):
        assert StreetNumberRule.PATTERN.search("12 rue de la Paix")
        assert StreetNumberRule.PATTERN.search("Bâtiment B, 3 allée des Pins")
        assert not StreetNumberRule.PATTERN.search("rue de la Paix")
        assert not StreetNumberRule.PATTERN.search("Paris 75001")

    def test_recency_uses_context_now(self, scorer, paris_descriptor):
        record = make_record(address="rue", established_on=date(2022, 1, 1))

        recent = scorer.score(paris_descriptor, record, ScoringContext(now=_at(2024, 1, 1)))
        old = scorer.score(paris_descriptor, record, ScoringContext(now=_at(2025, 6, 1)))

        assert recent.breakdown.get("recency") == 5
        assert "recency" not in old.breakdown

    def test_no_establishment_date_no_bonus(self, scorer, context, paris_descriptor):
        scored = scorer.score(paris_descriptor, make_record(established_on=None), context)
        assert "recency" not in scored.breakdown

    def test_missing_address_only_gates(self, scorer, context, paris_descriptor):
        scored = scorer.score(
            paris_descriptor, make_record(address=None, established_on=None), context
        )
        assert scored.score == 80


class TestConfiguration:
    """Custom weights and rule chains."""

    def test_custom_weights(self, scorer, now, paris_descriptor):
        context = ScoringContext(now=now, weights=ScoringWeights(department=50, commune=30))

        scored = scorer.score(
            paris_descriptor, make_record(address=None, established_on=None), context
        )

        assert scored.score == 80
        assert scored.breakdown == {"department": 50, "commune": 30}

    def test_custom_rule_chain(self, context, paris_descriptor):
        scorer = RuleBasedScorer(rules=[DepartmentGate(), CommuneGate()])

        scored = scorer.score(paris_descriptor, make_record(), context)

        assert scored.score == 80

    def test_deterministic(self, scorer, context, paris_descriptor):
        record = make_record()
        first = scorer.score(paris_descriptor, record, context)
        second = scorer.score(paris_descriptor, record, context)

        assert first.score == second.score
        assert first.breakdown == second.breakdown


def _at(year: int, month: int, day: int) -> datetime:
    return datetime(year, month, day, tzinfo=UTC)
