"""ADB device back-end."""

from radio_stress.devices.adb.config import AdbDeviceConfig
from radio_stress.devices.adb.device import AdbDevice
from radio_stress.devices.adb.manifest import adb_manifest

__all__ = ["AdbDevice", "AdbDeviceConfig", "adb_manifest"]
