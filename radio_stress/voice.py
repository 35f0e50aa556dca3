"""Voice connection verification through an instrumented call test."""

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path

from radio_stress.capture import CapturePolicy, after_failed_testcases
from radio_stress.devices.base import DeviceControlPort, InstrumentationRequest
from radio_stress.models.config import DEFAULT_TEST_NAME, InstrumentationTarget
from radio_stress.models.result import InstrumentationOutcome
from radio_stress.reporting.listener import InvocationListener

log = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class VoiceVerifier:
    """Places a call through the instrumented telephony test.

    The outcome is forwarded to ``listener`` as a test run. When the capture
    policy asks for it, a bug report is taken before that happens so the
    snapshot reflects the failing state.
    """

    device: DeviceControlPort
    target: InstrumentationTarget
    listener: InvocationListener
    capture_policy: CapturePolicy = after_failed_testcases
    capture_timeout: float = 600
    descriptive_name: str = DEFAULT_TEST_NAME

    def build_request(
        self, call_duration: str, phone_number: str
    ) -> InstrumentationRequest:
        return InstrumentationRequest(
            package=self.target.package,
            runner=self.target.runner,
            class_name=self.target.class_name,
            method=self.target.method,
            args={
                "callduration": call_duration,
                "phonenumber": phone_number,
                "repeatcount": "1",
            },
        )

    async def verify(self, call_duration: str, phone_number: str) -> bool:
        """Run one call and return whether it passed.

        Raises:
            DeviceNotAvailableError: If the device cannot run the test

        """
        log.info("Verifying voice connection on %s", self.device.serial)
        request = self.build_request(call_duration, phone_number)
        outcome = await self.device.run_instrumentation(request)

        bugreport = None
        if self.capture_policy(outcome):
            bugreport = await self._capture(outcome)

        await self._forward(outcome, bugreport)

        if outcome.has_failures:
            log.info(
                "Voice call failed: %d of %d test(s) failed",
                outcome.failed_count,
                outcome.total,
            )
            return False
        return True

    async def _capture(self, outcome: InstrumentationOutcome) -> Path | None:
        try:
            async with asyncio.timeout(self.capture_timeout):
                path = await self.device.take_bugreport(self.descriptive_name)
        except TimeoutError:
            log.error(
                "Abandoned bug report for %s after %ss",
                outcome.run_name,
                self.capture_timeout,
            )
            return None
        except Exception:
            log.exception("Failed to capture bug report for %s", outcome.run_name)
            return None
        log.info("Captured bug report for %s at %s", outcome.run_name, path)
        return path

    async def _forward(
        self, outcome: InstrumentationOutcome, bugreport: Path | None
    ) -> None:
        await self.listener.test_run_started(outcome.run_name, outcome.total)
        for test_id, trace in (outcome.failures or {}).items():
            await self.listener.test_failed(test_id, trace)
        if bugreport is not None:
            await self.listener.test_log(
                f"{self.descriptive_name}_bugreport", bugreport
            )
        await self.listener.test_run_ended(0, {})
