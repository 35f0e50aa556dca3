"""Configuration for the ADB device back-end."""

from pathlib import Path

from pydantic import Field

from radio_stress.models.base import Model


class AdbDeviceConfig(Model):
    """Configuration for the ADB device back-end."""

    serial: str
    adb_path: str = "adb"
    command_timeout: float = Field(default=120, gt=0)
    instrumentation_timeout: float = Field(default=1800, gt=0)
    ping_host: str = "www.google.com"
    bugreport_dir: Path = Path("bugreports")
