"""Tests for the metrics reporter."""

from unittest.mock import AsyncMock, Mock, call

import pytest

from radio_stress.reporting.listener import CollectingListener, InvocationListener
from radio_stress.reporting.metrics import report_metrics


async def test_reports_synthetic_run() -> None:
    """Metrics travel in an empty, zero duration run."""
    listener = Mock(spec=InvocationListener)
    listener.test_run_started = AsyncMock()
    listener.test_run_ended = AsyncMock()

    delivered = await report_metrics(
        "RadioStartupStress", {"iteration": "3"}, listener
    )

    assert delivered is True
    listener.test_run_started.assert_awaited_once_with("RadioStartupStress", 0)
    listener.test_run_ended.assert_awaited_once_with(0, {"iteration": "3"})


async def test_collected_run_carries_metrics() -> None:
    """A collecting listener ends up with one run holding the metrics."""
    listener = CollectingListener()

    await report_metrics("RadioStartupStress", {"iteration": "2"}, listener)

    (run,) = listener.runs
    assert run.name == "RadioStartupStress"
    assert run.test_count == 0
    assert run.metrics == {"iteration": "2"}


async def test_delivery_fault_is_logged_not_raised(
    caplog: pytest.LogCaptureFixture,
) -> None:
    """A sink that fails does not raise to the caller."""
    listener = Mock(spec=InvocationListener)
    listener.test_run_started = AsyncMock()
    listener.test_run_ended = AsyncMock(side_effect=OSError("dashboard down"))

    delivered = await report_metrics("RadioStartupStress", {"iteration": "1"}, listener)

    assert delivered is False
    assert listener.test_run_started.await_args_list == [call("RadioStartupStress", 0)]
    assert "Failed to report metrics RadioStartupStress" in caplog.text
