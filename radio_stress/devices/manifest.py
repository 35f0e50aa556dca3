"""Device manifest definition for the plugin system."""

from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass
from typing import Generic, TypeVar

from pydantic import BaseModel

from radio_stress.devices.base import DeviceControlPort

ConfigT = TypeVar("ConfigT", bound=BaseModel)


@dataclass(frozen=True, kw_only=True)
class DeviceManifest(Generic[ConfigT]):
    """Manifest describing a device back-end plugin.

    Holds the configuration class and the factory opening a device from it,
    so back-ends are only imported once selected by key.
    """

    config_cls: type[ConfigT]
    device_factory: Callable[[ConfigT], AbstractAsyncContextManager[DeviceControlPort]]
