"""Lookup of installed device back-ends."""

from importlib.metadata import entry_points
from typing import Any

from radio_stress.devices.manifest import DeviceManifest
from radio_stress.errors import RadioStressError

ENTRY_POINT_GROUP = "radio_stress.devices"


class DeviceNotFoundError(RadioStressError):
    """No installed back-end answers to the requested device key."""


def installed_backends() -> list[str]:
    """Names of the device back-ends registered by installed packages."""
    return sorted({entry.name for entry in entry_points(group=ENTRY_POINT_GROUP)})


def load_device_manifest(key: str) -> DeviceManifest[Any]:
    """Resolve a device key such as ``adb`` to its back-end manifest.

    Raises:
        DeviceNotFoundError: If no installed package registers ``key``

    """
    matches = entry_points(group=ENTRY_POINT_GROUP, name=key)
    if not matches:
        installed = ", ".join(installed_backends()) or "none"
        raise DeviceNotFoundError(
            f"No device back-end named {key!r} (installed: {installed})"
        )

    manifest: DeviceManifest[Any] = next(iter(matches)).load()
    return manifest
