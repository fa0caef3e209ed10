"""Tests for candidate acquisition and deduplication."""

from unittest.mock import MagicMock

import pytest
from factories import make_record

from dpe_matcher.domain.models import PropertyDescriptor
from dpe_matcher.errors import AcquisitionError, UpstreamError
from dpe_matcher.matching.candidates import acquire_candidates, deduplicate_records


@pytest.fixture
def client(settings):
    client = MagicMock()
    client.settings = settings
    return client


class TestDeduplicateRecords:
    """Tests for deduplicate_records."""

    def test_no_repeated_ids(self):
        batches = [
            [make_record("A"), make_record("B")],
            [make_record("B"), make_record("C"), make_record("A")],
        ]

        merged = deduplicate_records(batches)

        ids = [r.certificate_id for r in merged]
        assert ids == ["A", "B", "C"]
        assert len(ids) == len(set(ids))

    def test_first_seen_wins(self):
        first = make_record("A", address="1 rue du Premier")
        second = make_record("A", address="2 rue du Second")

        merged = deduplicate_records([[first], [second]])

        assert len(merged) == 1
        assert merged[0].address == "1 rue du Premier"

    def test_empty(self):
        assert deduplicate_records([]) == []
        assert deduplicate_records([[], []]) == []


class TestAcquireCandidates:
    """Tests for acquire_candidates."""

    def test_merges_strategies(self, client, paris_descriptor):
        results = {
            "commune_department": [make_record("A"), make_record("B")],
            "postal_pattern": [make_record("B"), make_record("C")],
        }
        client.search.side_effect = lambda query, strategy: results[strategy]

        acquisition = acquire_candidates(paris_descriptor, client)

        assert [r.certificate_id for r in acquisition.records] == ["A", "B", "C"]
        assert acquisition.raw_count == 4
        assert acquisition.duplicate_count == 1
        assert client.search.call_count == 2
        assert all(o.ok for o in acquisition.outcomes)

    def test_one_failed_strategy_is_tolerated(self, client, paris_descriptor):
        def search(query, strategy):
            if strategy == "commune_department":
                raise UpstreamError("HTTP 500", strategy=strategy, status_code=500)
            return [make_record("C")]

        client.search.side_effect = search

        acquisition = acquire_candidates(paris_descriptor, client)

        assert [r.certificate_id for r in acquisition.records] == ["C"]
        assert len(acquisition.failed_strategies) == 1
        assert acquisition.failed_strategies[0].strategy.name == "commune_department"
        assert "HTTP 500" in acquisition.failed_strategies[0].error

    def test_all_strategies_failing_raises(self, client, paris_descriptor):
        client.search.side_effect = UpstreamError("timed out")

        with pytest.raises(AcquisitionError) as exc_info:
            acquire_candidates(paris_descriptor, client)

        assert len(exc_info.value.errors) == 2

    def test_nothing_found_is_not_a_failure(self, client, paris_descriptor):
        client.search.return_value = []

        acquisition = acquire_candidates(paris_descriptor, client)

        assert acquisition.records == []
        assert acquisition.failed_strategies == []

    def test_unexpected_error_is_isolated(self, client, paris_descriptor):
        def search(query, strategy):
            if strategy == "postal_pattern":
                raise RuntimeError("boom")
            return [make_record("A")]

        client.search.side_effect = search

        acquisition = acquire_candidates(paris_descriptor, client)

        assert [r.certificate_id for r in acquisition.records] == ["A"]
        assert acquisition.failed_strategies[0].error == "boom"

    def test_no_strategies_no_requests(self, client):
        acquisition = acquire_candidates(PropertyDescriptor(commune="Paris"), client)

        assert acquisition.records == []
        client.search.assert_not_called()
