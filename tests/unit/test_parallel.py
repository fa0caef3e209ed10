"""
Unit tests for dpe_matcher.utils.parallel module.
"""

import time

from dpe_matcher.utils.parallel import execute_parallel


class TestExecuteParallel:
    """Test execute_parallel function."""

    def test_basic_execution(self):
        outcomes = execute_parallel([1, 2, 3, 4, 5], lambda x: x * x, max_workers=2)

        assert len(outcomes) == 5
        for outcome in outcomes:
            assert outcome.ok
            assert outcome.result == outcome.item * outcome.item

    def test_failure_does_not_cancel_siblings(self):
        errors_caught = []

        def fail_on_2(x: int) -> int:
            if x == 2:
                raise ValueError(f"Failed on {x}")
            return x * 10

        outcomes = execute_parallel(
            [1, 2, 3],
            fail_on_2,
            max_workers=3,
            error_handler=lambda item, error: errors_caught.append((item, error)),
        )

        assert len(outcomes) == 3
        assert len(errors_caught) == 1
        assert errors_caught[0][0] == 2
        failed = [o for o in outcomes if not o.ok]
        assert len(failed) == 1
        assert isinstance(failed[0].error, ValueError)
        assert failed[0].result is None
        assert [o.result for o in outcomes if o.ok] == [10, 30]

    def test_results_in_input_order(self):
        def slow_first(x: int) -> int:
            if x == 0:
                time.sleep(0.05)
            return x

        outcomes = execute_parallel([0, 1, 2], slow_first, max_workers=3)

        assert [o.item for o in outcomes] == [0, 1, 2]

    def test_empty_input(self):
        assert execute_parallel([], lambda x: x) == []

    def test_with_progress_bar(self):
        outcomes = execute_parallel([1, 2], lambda x: x, show_progress=True)
        assert [o.result for o in outcomes] == [1, 2]
