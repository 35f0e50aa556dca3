"""Result listeners receiving test run and invocation events."""

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path

log = logging.getLogger(__name__)


class InvocationListener:
    """Receiver of test run and invocation events.

    All events are no-ops by default so listeners only override what they use.
    """

    async def test_run_started(self, name: str, test_count: int) -> None:
        """A test run named ``name`` with ``test_count`` tests has started."""

    async def test_failed(self, test_id: str, trace: str) -> None:
        """A test case of the current run failed."""

    async def test_log(self, name: str, path: Path) -> None:
        """A log or diagnostic snapshot was captured for the current run."""

    async def test_run_ended(self, elapsed_ms: int, metrics: Mapping[str, str]) -> None:
        """The current test run ended, carrying its run metrics."""

    async def invocation_failed(self, error: BaseException) -> None:
        """The invocation hit a terminal fault."""

    async def invocation_ended(self, elapsed: float) -> None:
        """The invocation is over, ``elapsed`` seconds after it started."""


@dataclass(kw_only=True)
class TestRunRecord:
    """Everything collected for one test run."""

    __test__ = False

    name: str
    test_count: int
    failures: dict[str, str] = field(default_factory=dict)
    logs: dict[str, Path] = field(default_factory=dict)
    metrics: Mapping[str, str] = field(default_factory=dict)
    elapsed_ms: int | None = None

    @property
    def is_complete(self) -> bool:
        return self.elapsed_ms is not None

    @property
    def num_failed(self) -> int:
        return len(self.failures)

    @property
    def num_passed(self) -> int:
        return max(self.test_count - self.num_failed, 0)


class CollectingListener(InvocationListener):
    """Listener that keeps every test run it sees."""

    def __init__(self) -> None:
        self.runs: list[TestRunRecord] = []

    @property
    def current_run(self) -> TestRunRecord | None:
        return self.runs[-1] if self.runs else None

    async def test_run_started(self, name: str, test_count: int) -> None:
        self.runs.append(TestRunRecord(name=name, test_count=test_count))

    async def test_failed(self, test_id: str, trace: str) -> None:
        if (run := self.current_run) is None:
            log.warning("Dropping failure of %s reported outside a test run", test_id)
            return
        run.failures[test_id] = trace

    async def test_log(self, name: str, path: Path) -> None:
        if (run := self.current_run) is not None:
            run.logs[name] = path

    async def test_run_ended(self, elapsed_ms: int, metrics: Mapping[str, str]) -> None:
        if (run := self.current_run) is None:
            log.warning("Dropping end of a test run that never started")
            return
        run.elapsed_ms = elapsed_ms
        run.metrics = dict(metrics)

    @property
    def num_failed_tests(self) -> int:
        return sum(run.num_failed for run in self.runs)

    @property
    def num_passed_tests(self) -> int:
        return sum(run.num_passed for run in self.runs)

    def has_failed_tests(self) -> bool:
        return self.num_failed_tests > 0


class LoggingListener(InvocationListener):
    """Listener that logs every event it receives."""

    async def test_run_started(self, name: str, test_count: int) -> None:
        log.info("Test run started: name=%s tests=%d", name, test_count)

    async def test_failed(self, test_id: str, trace: str) -> None:
        log.warning("Test failed: %s\n%s", test_id, trace)

    async def test_log(self, name: str, path: Path) -> None:
        log.info("Captured log %s at %s", name, path)

    async def test_run_ended(self, elapsed_ms: int, metrics: Mapping[str, str]) -> None:
        log.info("Test run ended: elapsed=%dms metrics=%s", elapsed_ms, dict(metrics))

    async def invocation_failed(self, error: BaseException) -> None:
        log.error("Invocation failed: %s", error)

    async def invocation_ended(self, elapsed: float) -> None:
        log.info("Invocation ended after %.1fs", elapsed)


@dataclass(frozen=True)
class ListenerChain(InvocationListener):
    """Forward every event to several listeners.

    A listener raising does not stop the others from receiving the event.
    """

    listeners: Sequence[InvocationListener]

    async def _forward(self, event: str, *args: object) -> None:
        for listener in self.listeners:
            try:
                await getattr(listener, event)(*args)
            except Exception:
                log.exception(
                    "Listener %s failed handling %s", type(listener).__name__, event
                )

    async def test_run_started(self, name: str, test_count: int) -> None:
        await self._forward("test_run_started", name, test_count)

    async def test_failed(self, test_id: str, trace: str) -> None:
        await self._forward("test_failed", test_id, trace)

    async def test_log(self, name: str, path: Path) -> None:
        await self._forward("test_log", name, path)

    async def test_run_ended(self, elapsed_ms: int, metrics: Mapping[str, str]) -> None:
        await self._forward("test_run_ended", elapsed_ms, metrics)

    async def invocation_failed(self, error: BaseException) -> None:
        await self._forward("invocation_failed", error)

    async def invocation_ended(self, elapsed: float) -> None:
        await self._forward("invocation_ended", elapsed)
