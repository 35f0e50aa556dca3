"""Abstract device control port."""

import asyncio
import logging
import re
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from radio_stress.models.result import InstrumentationOutcome

log = logging.getLogger(__name__)

BOOT_COMPLETE_PROPERTY = "dev.bootcomplete"
PRODUCT_PROPERTY = "ro.build.product"

PACKET_LOSS_PATTERN = re.compile(r"(\d+(?:\.\d+)?)% packet loss")


@dataclass(frozen=True, kw_only=True)
class InstrumentationRequest:
    """A single remote instrumentation invocation."""

    package: str
    runner: str
    class_name: str | None = None
    method: str | None = None
    args: Mapping[str, str] = field(default_factory=dict)

    @property
    def run_name(self) -> str:
        return self.package


@dataclass(frozen=True, kw_only=True)
class DeviceControlPort(ABC):
    """Control channel to a single device under test.

    Back-ends implement the raw operations. Boot tracking, reachability and
    model lookup are built on top of ``exec_shell``. Every operation may raise
    DeviceNotAvailableError when the device cannot be reached.
    """

    @property
    @abstractmethod
    def serial(self) -> str:
        """Identifier of the device."""

    @abstractmethod
    async def exec_shell(self, command: str, *, check: bool = True) -> str:
        """Run a shell command on the device and return its output.

        Args:
            command: Shell command line
            check: Raise when the command exits non-zero. When disabled only
                a lost connection to the device raises.

        """

    @abstractmethod
    async def wait_for_available(self, timeout: float) -> None:
        """Wait until the device accepts commands again.

        Raises:
            DeviceNotAvailableError: If the device is not available in time

        """

    @abstractmethod
    async def enable_root(self) -> None:
        """Restart the control daemon with elevated privileges."""

    @abstractmethod
    async def post_boot_setup(self) -> None:
        """Apply the standard post boot device setup."""

    @abstractmethod
    async def clear_error_dialogs(self) -> None:
        """Dismiss any error dialogs blocking the UI."""

    @abstractmethod
    async def run_instrumentation(
        self, request: InstrumentationRequest
    ) -> InstrumentationOutcome:
        """Run an instrumentation test and return its outcome."""

    @abstractmethod
    async def take_bugreport(self, name: str) -> Path:
        """Capture a bug report and return where it was stored."""

    async def reset_boot_complete(self) -> None:
        """Clear the boot complete signal so a stale one is not misread."""
        await self.exec_shell(f"setprop {BOOT_COMPLETE_PROPERTY} 0")

    async def is_boot_complete(self) -> bool:
        output = await self.exec_shell(f"getprop {BOOT_COMPLETE_PROPERTY}")
        return output.strip() == "1"

    async def wait_for_boot_complete(
        self, timeout: float, poll_interval: float = 5
    ) -> bool:
        """Wait for the device to report boot completion.

        Args:
            timeout: Maximum wait time in seconds
            poll_interval: Seconds between polls

        Returns:
            True once boot completed, False if the timeout elapsed first

        """
        deadline = asyncio.get_event_loop().time() + timeout

        while True:
            if await self.is_boot_complete():
                return True

            if asyncio.get_event_loop().time() >= deadline:
                log.warning(
                    "Device %s did not complete boot within %s seconds",
                    self.serial,
                    timeout,
                )
                return False

            await asyncio.sleep(poll_interval)

    async def probe_reachability(self, host: str = "www.google.com") -> bool:
        """Ping a well known host from the device."""
        output = await self.exec_shell(f"ping -c 5 -w 15 {host}", check=False)
        if (match := PACKET_LOSS_PATTERN.search(output)) is None:
            log.info("Ping to %s gave no statistics: %s", host, output.strip())
            return False
        loss = float(match.group(1))
        log.info("Ping to %s: %s%% packet loss", host, match.group(1))
        return loss < 100

    async def get_model_id(self) -> str:
        output = await self.exec_shell(f"getprop {PRODUCT_PROPERTY}")
        return output.strip()

    async def is_voice_capable(self, non_voice_devices: frozenset[str]) -> bool:
        """Check whether the device model can place voice calls."""
        model_id = await self.get_model_id()
        capable = model_id not in non_voice_devices
        log.info("Device %s model=%s voice_capable=%s", self.serial, model_id, capable)
        return capable
