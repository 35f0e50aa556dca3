"""Report run metrics to a listener as a synthetic test run."""

import logging
from collections.abc import Mapping

from radio_stress.reporting.listener import InvocationListener

log = logging.getLogger(__name__)


async def report_metrics(
    name: str, metrics: Mapping[str, str], listener: InvocationListener
) -> bool:
    """Report metrics by creating an empty test run to carry them.

    Delivery faults are logged and never raised: a listener that cannot take
    the metrics does not change the verdict of the run that produced them.

    Returns:
        True if the listener accepted both events

    """
    log.info("Reporting metrics to %s: %s", name, dict(metrics))
    try:
        await listener.test_run_started(name, 0)
        await listener.test_run_ended(0, metrics)
    except Exception:
        log.exception("Failed to report metrics %s", name)
        return False
    return True
