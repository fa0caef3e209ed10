"""
Unit tests for dpe_matcher.domain.models module.
"""

from datetime import date

from factories import make_record

from dpe_matcher.domain.models import (
    Coordinate,
    DistancedCandidate,
    PropertyDescriptor,
    ScoredCandidate,
)


class TestCertificateRecord:
    """Test CertificateRecord identity and summaries."""

    def test_identity_is_certificate_id(self):
        a = make_record("A", address="1 rue du Premier")
        b = make_record("A", address="2 rue du Second")

        assert a == b
        assert hash(a) == hash(b)
        assert len({a, b}) == 1

    def test_different_ids_differ(self):
        assert make_record("A") != make_record("B")

    def test_is_active(self):
        record = make_record(expires_on=date(2034, 5, 31))

        assert record.is_active(on=date(2025, 6, 1))
        assert not record.is_active(on=date(2034, 5, 31))
        assert not record.is_active(on=date(2035, 1, 1))

    def test_no_expiry_is_not_active(self):
        assert not make_record(expires_on=None).is_active(on=date(2025, 6, 1))

    def test_to_summary(self):
        record = make_record(
            "A",
            energy_class="D",
            expires_on=date(2034, 5, 31),
            surface=54.2,
        )

        summary = record.to_summary(on=date(2025, 6, 1))

        assert summary["dpe_id"] == "A"
        assert summary["energy"] == "D"
        assert summary["ghg"] == "N/A"
        assert summary["establishment_date"] == "2024-06-01"
        assert summary["expiry_date"] == "2034-05-31"
        assert summary["is_active"] is True
        assert summary["surface_area"] == 54.2

    def test_to_summary_unknown_address(self):
        assert make_record(address=None).to_summary()["address"] == "Unknown"


class TestScoredCandidate:
    """Test ScoredCandidate serialization."""

    def test_disqualified_reason(self):
        candidate = ScoredCandidate(make_record(), 0, disqualification="wrong_commune")

        assert not candidate.qualified
        assert candidate.to_dict()["reason"] == "Disqualified: wrong_commune"

    def test_below_threshold_reason(self):
        candidate = ScoredCandidate(make_record(), 85, {"department": 40, "commune": 40})

        data = candidate.to_dict()

        assert candidate.qualified
        assert data["reason"] == "Score: 85/100 - Not exact enough"
        assert data["breakdown"] == {"department": 40, "commune": 40}

    def test_qualified_reason(self):
        candidate = ScoredCandidate(make_record(), 85)
        assert candidate.to_dict(threshold=80)["reason"] == "Qualified candidate"


def test_descriptor_label():
    assert PropertyDescriptor(department="75", commune="Paris").label() == "75 Paris"
    assert PropertyDescriptor(department="75", cadastral_id="75101000AB0001").label() == (
        "75101000AB0001"
    )
    assert PropertyDescriptor().label() == "<empty descriptor>"


def test_distanced_candidate_to_dict():
    record = make_record("A", coordinate=Coordinate(48.86, 2.34))

    data = DistancedCandidate(record, 123.456).to_dict()

    assert data["id"] == "A"
    assert data["distance_m"] == 123.5
