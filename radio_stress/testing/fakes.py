"""Scripted in-memory device for exercising the orchestrator."""

from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

from radio_stress.devices.base import (
    BOOT_COMPLETE_PROPERTY,
    PRODUCT_PROPERTY,
    DeviceControlPort,
    InstrumentationRequest,
)
from radio_stress.errors import DeviceNotAvailableError
from radio_stress.models.result import InstrumentationOutcome


@dataclass(frozen=True, kw_only=True)
class FakeDevice(DeviceControlPort):
    """Device whose answers are scripted per iteration.

    ``boot_results``, ``call_results`` and ``ping_results`` are consumed one
    entry per use and default to success once exhausted. ``unavailable_on``
    makes the device vanish when the given iteration waits for it.
    """

    device_serial: str = "fake-serial"
    model_id: str = "mako"
    boot_results: Sequence[bool] = ()
    call_results: Sequence[bool] = ()
    ping_results: Sequence[bool] = ()
    unavailable_on: int | None = None
    bugreport_error: Exception | None = None
    events: list[str] = field(default_factory=list)
    requests: list[InstrumentationRequest] = field(default_factory=list)
    _uses: dict[str, int] = field(default_factory=dict)

    @property
    def serial(self) -> str:
        return self.device_serial

    @property
    def iteration(self) -> int:
        return self._uses.get("start", 0) - 1

    def _next(self, key: str, script: Sequence[bool]) -> bool:
        index = self._uses.get(key, 0)
        self._uses[key] = index + 1
        return script[index] if index < len(script) else True

    async def exec_shell(self, command: str, *, check: bool = True) -> str:
        self.events.append(command)
        if command in ("stop", "start"):
            self._uses[command] = self._uses.get(command, 0) + 1
        if command == f"getprop {PRODUCT_PROPERTY}":
            return f"{self.model_id}\n"
        if command == f"getprop {BOOT_COMPLETE_PROPERTY}":
            return "1\n"
        return ""

    async def wait_for_boot_complete(
        self, timeout: float, poll_interval: float = 5
    ) -> bool:
        self.events.append("wait_for_boot_complete")
        return self._next("boot", self.boot_results)

    async def wait_for_available(self, timeout: float) -> None:
        self.events.append("wait_for_available")
        if self.unavailable_on == self.iteration:
            raise DeviceNotAvailableError(f"{self.serial} went offline")

    async def enable_root(self) -> None:
        self.events.append("enable_root")

    async def post_boot_setup(self) -> None:
        self.events.append("post_boot_setup")

    async def clear_error_dialogs(self) -> None:
        self.events.append("clear_error_dialogs")

    async def probe_reachability(self, host: str = "www.google.com") -> bool:
        self.events.append("probe_reachability")
        return self._next("ping", self.ping_results)

    async def run_instrumentation(
        self, request: InstrumentationRequest
    ) -> InstrumentationOutcome:
        self.events.append("run_instrumentation")
        self.requests.append(request)
        passed = self._next("call", self.call_results)
        return InstrumentationOutcome(
            run_name=request.run_name,
            total=1,
            failed=0 if passed else 1,
            failures=None if passed else {f"{request.class_name}#call": "failed"},
        )

    async def take_bugreport(self, name: str) -> Path:
        self.events.append("take_bugreport")
        if self.bugreport_error is not None:
            raise self.bugreport_error
        return Path(f"/tmp/{name}.zip")
