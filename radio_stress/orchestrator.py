"""Endurance orchestrator driving the reboot and verify loop on one device."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from functools import partial

from radio_stress.capture import CapturePolicy, after_failed_testcases
from radio_stress.classifier import classify
from radio_stress.devices.base import DeviceControlPort
from radio_stress.errors import (
    BootTimeoutError,
    DeviceNotAvailableError,
    PreconditionError,
    RunAbortedError,
)
from radio_stress.models.config import EnduranceRun
from radio_stress.models.result import EnduranceResult, IterationResult, RunMetrics
from radio_stress.reporting.listener import InvocationListener
from radio_stress.reporting.metrics import report_metrics
from radio_stress.voice import VoiceVerifier

log = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class EnduranceOrchestrator:
    """Repeatedly restarts a device and verifies its radio comes back.

    Every iteration runs to completion even when verification fails, so the
    final count is the true success ratio. A device that stops responding
    aborts the run with RunAbortedError instead.
    """

    device: DeviceControlPort | None
    config: EnduranceRun
    listener: InvocationListener
    capture_policy: CapturePolicy = after_failed_testcases
    voice: VoiceVerifier | None = None

    async def run(self) -> EnduranceResult:
        """Run all iterations and report the success count.

        Returns:
            The result of a run that went through every iteration

        Raises:
            PreconditionError: If the run cannot start
            RunAbortedError: If the device became unavailable mid-run

        """
        if self.device is None:
            raise PreconditionError("No device to run the endurance test on")
        device = self.device
        config = self.config
        log.debug(
            "Input options: iterations=%d call_duration=%s phone_number=%s "
            "non_voice_devices=%s",
            config.iterations,
            config.call_duration,
            config.phone_number,
            sorted(config.non_voice_devices),
        )

        metrics = RunMetrics()
        try:
            voice_applicable = await device.is_voice_capable(config.non_voice_devices)
        except DeviceNotAvailableError as e:
            raise RunAbortedError(
                f"Device {device.serial} unavailable: {e}", metrics
            ) from e

        verify_voice: Callable[[], Awaitable[bool]] | None = None
        if voice_applicable:
            if config.phone_number is None:
                raise PreconditionError(
                    "A phone number is required to verify voice on a voice "
                    "capable device"
                )
            verify_voice = partial(
                self._voice_verifier(device).verify,
                config.call_duration,
                config.phone_number,
            )

        for index in range(config.iterations):
            log.info("Radio startup test iteration: %d", index)
            try:
                result = await self._run_iteration(device, verify_voice, index)
            except BootTimeoutError as e:
                metrics.record(
                    IterationResult(
                        index=index,
                        voice_applicable=voice_applicable,
                        voice_verified=None,
                        data_verified=False,
                        success=False,
                    )
                )
                raise RunAbortedError(
                    f"Device failed to reboot on iteration {index}", metrics
                ) from e
            except DeviceNotAvailableError as e:
                raise RunAbortedError(
                    f"Device {device.serial} unavailable on iteration {index}: {e}",
                    metrics,
                ) from e
            metrics.record(result)
            log.info(
                "Iteration %d: voice=%s data=%s success=%s",
                index,
                result.voice_verified,
                result.data_verified,
                result.success,
            )

        log.info(
            "Success runs out of total %d runs: %d",
            config.iterations,
            metrics.successful,
        )
        await report_metrics(config.metrics_name, metrics.as_metrics(), self.listener)

        if metrics.successful != config.iterations:
            log.error(
                "Endurance run failed: %d of %d iterations succeeded",
                metrics.successful,
                config.iterations,
            )
            return EnduranceResult(
                iterations=config.iterations, metrics=metrics, status="failure"
            )
        return EnduranceResult(
            iterations=config.iterations, metrics=metrics, status="success"
        )

    def _voice_verifier(self, device: DeviceControlPort) -> VoiceVerifier:
        if self.voice is not None:
            return self.voice
        return VoiceVerifier(
            device=device,
            target=self.config.instrumentation,
            listener=self.listener,
            capture_policy=self.capture_policy,
            capture_timeout=self.config.capture_timeout,
            descriptive_name=self.config.test_name,
        )

    async def _restart(self, device: DeviceControlPort) -> None:
        """Restart the runtime in place and bring the device back to a clean state."""
        await device.reset_boot_complete()

        await device.exec_shell("stop")
        await device.exec_shell("start")

        if not await device.wait_for_boot_complete(self.config.boot_timeout):
            raise BootTimeoutError(
                f"Device {device.serial} did not complete boot within "
                f"{self.config.boot_timeout} seconds"
            )
        await device.wait_for_available(self.config.available_timeout)

        await device.enable_root()
        await device.post_boot_setup()
        await device.clear_error_dialogs()

    async def _run_iteration(
        self,
        device: DeviceControlPort,
        verify_voice: Callable[[], Awaitable[bool]] | None,
        index: int,
    ) -> IterationResult:
        await self._restart(device)

        voice_ok: bool | None = None
        if verify_voice is not None:
            voice_ok = await verify_voice()
            # time for the data call to be set up
            await asyncio.sleep(self.config.settle_delay)

        data_ok = await device.probe_reachability()
        return classify(index, verify_voice is not None, voice_ok, data_ok)
