"""Policies deciding when to capture a diagnostic snapshot.

A policy is any callable taking the outcome of an instrumentation invocation
and returning whether a bug report should be taken before the result is
reported.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TypeAlias

from radio_stress.models.result import InstrumentationOutcome

CapturePolicy: TypeAlias = Callable[[InstrumentationOutcome], bool]


def after_failed_testcases(outcome: InstrumentationOutcome) -> bool:
    """Capture when at least one test case failed."""
    return outcome.has_failures


def always(outcome: InstrumentationOutcome) -> bool:
    """Capture after every invocation."""
    return True


def never(outcome: InstrumentationOutcome) -> bool:
    """Never capture."""
    return False


@dataclass(kw_only=True)
class EveryNthFailure:
    """Capture on every nth failing invocation (1st, n+1th, 2n+1th, ...)."""

    n: int
    _failures: int = field(default=0, init=False, repr=False)

    def __post_init__(self) -> None:
        if self.n < 1:
            raise ValueError(f"n must be positive, got {self.n}")

    def __call__(self, outcome: InstrumentationOutcome) -> bool:
        if not outcome.has_failures:
            return False
        self._failures += 1
        return (self._failures - 1) % self.n == 0
