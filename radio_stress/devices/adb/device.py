"""ADB device back-end implementation."""

import asyncio
import logging
import re
import shlex
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from radio_stress.devices.adb.config import AdbDeviceConfig
from radio_stress.devices.adb.instrumentation import parse_instrumentation_output
from radio_stress.devices.base import DeviceControlPort, InstrumentationRequest
from radio_stress.errors import DeviceNotAvailableError
from radio_stress.models.result import InstrumentationOutcome

log = logging.getLogger(__name__)

TRANSPORT_ERROR_PATTERN = re.compile(
    r"^(?:adb: )?error: (?:device .*(?:offline|not found|unauthorized)|no devices)",
    re.MULTILINE,
)
ERROR_DIALOG_MARKERS = ("Application Error", "Application Not Responding")
MAX_DIALOG_DISMISSALS = 5


@dataclass(frozen=True, kw_only=True)
class AdbDevice(DeviceControlPort):
    """Device controlled through the ``adb`` command line tool."""

    config: AdbDeviceConfig

    @classmethod
    @asynccontextmanager
    async def from_config(
        cls, config: AdbDeviceConfig
    ) -> AsyncGenerator["AdbDevice", None]:
        """Open the device, checking it is attached first."""
        device = cls(config=config)
        state = await device.adb("get-state")
        if state.strip() != "device":
            raise DeviceNotAvailableError(
                f"Device {config.serial} is in state {state.strip()!r}"
            )
        yield device

    @property
    def serial(self) -> str:
        return self.config.serial

    async def adb(
        self, *args: str, timeout: float | None = None, check: bool = True
    ) -> str:
        """Run an adb command against this device and return its stdout.

        With ``check`` disabled a non-zero exit status is returned as output
        unless adb itself reports that the device cannot be reached.
        """
        timeout = timeout or self.config.command_timeout
        try:
            process = await asyncio.create_subprocess_exec(
                self.config.adb_path,
                "-s",
                self.serial,
                *args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise DeviceNotAvailableError(f"Cannot run adb: {e}") from e

        try:
            async with asyncio.timeout(timeout):
                stdout, stderr = await process.communicate()
        except TimeoutError as e:
            process.kill()
            await process.wait()
            raise DeviceNotAvailableError(
                f"adb {' '.join(args)} on {self.serial} timed out after {timeout}s"
            ) from e

        error = stderr.decode(errors="replace").strip()
        if process.returncode != 0 and (
            check or TRANSPORT_ERROR_PATTERN.search(error)
        ):
            raise DeviceNotAvailableError(
                f"adb {' '.join(args)} on {self.serial} failed: {error}"
            )
        return stdout.decode(errors="replace")

    async def exec_shell(self, command: str, *, check: bool = True) -> str:
        log.debug("Running shell command on %s: %s", self.serial, command)
        return await self.adb("shell", command, check=check)

    async def wait_for_available(
        self, timeout: float, poll_interval: float = 2
    ) -> None:
        """Wait for adb to see the device and the package manager to answer."""
        deadline = asyncio.get_event_loop().time() + timeout
        await self.adb("wait-for-device", timeout=timeout)

        while True:
            output = await self.exec_shell("pm path android", check=False)
            if output.strip().startswith("package:"):
                return

            if asyncio.get_event_loop().time() >= deadline:
                raise DeviceNotAvailableError(
                    f"Device {self.serial} not available after {timeout} seconds"
                )

            await asyncio.sleep(poll_interval)

    async def enable_root(self) -> None:
        output = await self.adb("root")
        if "cannot run as root" in output:
            log.warning(
                "Device %s does not allow root: %s", self.serial, output.strip()
            )
            return
        await self.adb("wait-for-device")

    async def post_boot_setup(self) -> None:
        await self.exec_shell("svc power stayon true")
        await self.exec_shell("wm dismiss-keyguard")

    async def clear_error_dialogs(self) -> None:
        for _ in range(MAX_DIALOG_DISMISSALS):
            windows = await self.exec_shell("dumpsys window windows")
            if not any(marker in windows for marker in ERROR_DIALOG_MARKERS):
                return
            log.info("Dismissing error dialog on %s", self.serial)
            await self.exec_shell("input keyevent KEYCODE_ENTER")
        log.warning("Error dialogs still showing on %s", self.serial)

    async def probe_reachability(self, host: str | None = None) -> bool:
        return await super().probe_reachability(host or self.config.ping_host)

    async def run_instrumentation(
        self, request: InstrumentationRequest
    ) -> InstrumentationOutcome:
        command = ["am", "instrument", "-w", "-r"]
        for key, value in request.args.items():
            command += ["-e", key, value]
        if request.class_name is not None:
            target = request.class_name
            if request.method is not None:
                target = f"{target}#{request.method}"
            command += ["-e", "class", target]
        command.append(f"{request.package}/{request.runner}")

        log.info("Running instrumentation on %s: %s", self.serial, shlex.join(command))
        output = await self.adb(
            "shell", shlex.join(command), timeout=self.config.instrumentation_timeout
        )
        return parse_instrumentation_output(request.run_name, output)

    async def take_bugreport(self, name: str) -> Path:
        timestamp = datetime.now(timezone.utc).strftime("%Y%m%d-%H%M%S")
        self.config.bugreport_dir.mkdir(parents=True, exist_ok=True)
        path = self.config.bugreport_dir / f"{name}_{self.serial}_{timestamp}.zip"
        await self.adb(
            "bugreport", str(path), timeout=self.config.instrumentation_timeout
        )
        return path
