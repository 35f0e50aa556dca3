"""Tests for diagnostic capture policies."""

import pytest

from radio_stress.capture import EveryNthFailure, after_failed_testcases, always, never
from radio_stress.testing.factories import InstrumentationOutcomeFactory


@pytest.mark.parametrize(("failed", "expected"), [(0, False), (1, True), (3, True)])
def test_after_failed_testcases(failed: int, expected: bool) -> None:
    """Captures exactly when at least one test case failed."""
    outcome = InstrumentationOutcomeFactory.build(total=3, failed=failed)

    assert after_failed_testcases(outcome) is expected


def test_after_failed_testcases_counts_errors() -> None:
    """Errored tests count as failures."""
    outcome = InstrumentationOutcomeFactory.build(failed=0, errors=1)

    assert after_failed_testcases(outcome) is True


@pytest.mark.parametrize("failed", [0, 1])
def test_always_and_never(failed: int) -> None:
    """Fixed policies ignore the outcome."""
    outcome = InstrumentationOutcomeFactory.build(failed=failed)

    assert always(outcome) is True
    assert never(outcome) is False


class TestEveryNthFailure:
    """Tests for EveryNthFailure."""

    def test_captures_first_and_every_nth_failure(self) -> None:
        """Captures the 1st, 3rd and 5th failure with n=2."""
        policy = EveryNthFailure(n=2)
        failing = InstrumentationOutcomeFactory.build(failed=1)

        decisions = [policy(failing) for _ in range(5)]

        assert decisions == [True, False, True, False, True]

    def test_passing_outcomes_do_not_count(self) -> None:
        """Only failing invocations advance the counter."""
        policy = EveryNthFailure(n=2)
        failing = InstrumentationOutcomeFactory.build(failed=1)
        passing = InstrumentationOutcomeFactory.build(failed=0)

        assert policy(failing) is True
        assert policy(passing) is False
        assert policy(passing) is False
        assert policy(failing) is False
        assert policy(failing) is True

    def test_rejects_non_positive_n(self) -> None:
        """n must be at least 1."""
        with pytest.raises(ValueError, match="n must be positive"):
            EveryNthFailure(n=0)
