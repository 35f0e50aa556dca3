"""Models for iteration outcomes and run metrics."""

from collections.abc import Mapping
from dataclasses import dataclass
from enum import StrEnum
from typing import Literal

METRIC_KEY = "iteration"


class InvocationStatus(StrEnum):
    """Terminal status of a whole invocation."""

    SUCCESS = "SUCCESS"
    BUILD_ERROR = "BUILD_ERROR"
    FAILED = "FAILED"


@dataclass(frozen=True, kw_only=True)
class IterationResult:
    """Outcome of one reboot and verify pass.

    ``voice_verified`` is None when voice verification does not apply to the
    device under test.
    """

    index: int
    voice_applicable: bool
    voice_verified: bool | None
    data_verified: bool
    success: bool


@dataclass(kw_only=True)
class RunMetrics:
    """Counters accumulated across the iterations of a run."""

    attempted: int = 0
    successful: int = 0

    def record(self, result: IterationResult) -> None:
        """Fold one iteration result into the counters."""
        self.attempted += 1
        if result.success:
            self.successful += 1

    def as_metrics(self) -> Mapping[str, str]:
        """Return the counters as the reported metric record."""
        return {METRIC_KEY: str(self.successful)}


@dataclass(frozen=True, kw_only=True)
class EnduranceResult:
    """Final verdict of an endurance run that ran all of its iterations."""

    iterations: int
    metrics: RunMetrics
    status: Literal["success", "failure"]

    @property
    def passed(self) -> bool:
        return self.status == "success"


@dataclass(frozen=True, kw_only=True)
class InstrumentationOutcome:
    """Summary of one instrumentation invocation."""

    run_name: str
    total: int
    failed: int = 0
    errors: int = 0
    failures: Mapping[str, str] | None = None

    @property
    def failed_count(self) -> int:
        return self.failed + self.errors

    @property
    def has_failures(self) -> bool:
        return self.failed_count > 0
