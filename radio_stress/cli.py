"""CLI entry point for the radio startup stress test."""

import argparse
import asyncio
import json
import logging
import sys
import time
from contextlib import AsyncExitStack
from typing import Any

from radio_stress.devices.loading import load_device_manifest
from radio_stress.errors import (
    DeviceNotAvailableError,
    PreconditionError,
    RunAbortedError,
    RunFailedError,
)
from radio_stress.models.config import EnduranceRun
from radio_stress.models.result import EnduranceResult, RunMetrics
from radio_stress.orchestrator import EnduranceOrchestrator
from radio_stress.reporting.listener import (
    InvocationListener,
    ListenerChain,
    LoggingListener,
)
from radio_stress.reporting.notification import (
    NotificationConfig,
    NotificationReporter,
    WebhookNotifier,
    WebhookNotifierConfig,
)

EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_ABORTED = 2


def format_output(result: EnduranceResult) -> dict[str, Any]:
    """Format a completed run for JSON output."""
    return {
        "status": result.status,
        "iterations": result.iterations,
        "attempted": result.metrics.attempted,
        "successful": result.metrics.successful,
        "metrics": dict(result.metrics.as_metrics()),
    }


def format_aborted(error: Exception, metrics: RunMetrics | None) -> dict[str, Any]:
    """Format an aborted run for JSON output."""
    return {
        "status": "aborted",
        "message": str(error),
        "attempted": metrics.attempted if metrics else 0,
        "successful": metrics.successful if metrics else 0,
    }


async def run(
    device_key: str,
    device_config_json: str,
    run_config_json: str = "{}",
    notification_config_json: str | None = None,
    notification_url: str | None = None,
) -> int:
    """Run the endurance test and return exit code."""
    log = logging.getLogger("radio_stress")

    log.info("Loading device back-end: %s", device_key)
    manifest = load_device_manifest(device_key)
    device_config = manifest.config_cls(**json.loads(device_config_json))
    run_config = EnduranceRun.model_validate_json(run_config_json)

    async with AsyncExitStack() as stack:
        listeners: list[InvocationListener] = [LoggingListener()]
        if notification_config_json is not None and notification_url is not None:
            notifier = await stack.enter_async_context(
                WebhookNotifier.from_config(
                    WebhookNotifierConfig(url=notification_url)
                )
            )
            listeners.append(
                NotificationReporter(
                    NotificationConfig.model_validate_json(notification_config_json),
                    notifier,
                )
            )
        listener = ListenerChain(listeners)

        started = time.monotonic()
        try:
            async with manifest.device_factory(device_config) as device:
                orchestrator = EnduranceOrchestrator(
                    device=device, config=run_config, listener=listener
                )
                result = await orchestrator.run()
        except (PreconditionError, DeviceNotAvailableError, RunAbortedError) as e:
            log.error("Endurance run aborted: %s", e)
            await listener.invocation_failed(e)
            await listener.invocation_ended(time.monotonic() - started)
            metrics = e.metrics if isinstance(e, RunAbortedError) else None
            print(json.dumps(format_aborted(e, metrics), indent=2))
            return EXIT_ABORTED

        if not result.passed:
            await listener.invocation_failed(
                RunFailedError(
                    f"{result.metrics.successful} of {result.iterations} "
                    "iterations succeeded"
                )
            )
        await listener.invocation_ended(time.monotonic() - started)

    print(json.dumps(format_output(result), indent=2))
    return EXIT_SUCCESS if result.passed else EXIT_FAILURE


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Stress the radio of an Android device by restarting it repeatedly"
    )
    parser.add_argument(
        "--device",
        default="adb",
        help="Device back-end key (default: adb)",
    )
    parser.add_argument(
        "--device-config",
        required=True,
        help="JSON configuration for the device back-end",
    )
    parser.add_argument(
        "--run-config",
        default="{}",
        help="JSON configuration of the endurance run",
    )
    parser.add_argument(
        "--notification-config",
        default=None,
        help="JSON configuration of result notifications",
    )
    parser.add_argument(
        "--notification-url",
        default=None,
        help="Mail relay endpoint notifications are posted to",
    )

    args = parser.parse_args()
    if (args.notification_config is None) != (args.notification_url is None):
        parser.error(
            "--notification-config and --notification-url must be given together"
        )

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    exit_code = asyncio.run(
        run(
            device_key=args.device,
            device_config_json=args.device_config,
            run_config_json=args.run_config,
            notification_config_json=args.notification_config,
            notification_url=args.notification_url,
        )
    )
    sys.exit(exit_code)


if __name__ == "__main__":  # pragma: no cover
    main()
