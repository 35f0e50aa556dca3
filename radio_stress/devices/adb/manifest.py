"""ADB device back-end manifest."""

from radio_stress.devices.adb.config import AdbDeviceConfig
from radio_stress.devices.adb.device import AdbDevice
from radio_stress.devices.manifest import DeviceManifest

adb_manifest = DeviceManifest(
    config_cls=AdbDeviceConfig,
    device_factory=AdbDevice.from_config,
)
