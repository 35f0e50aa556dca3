"""Exceptions raised while running an endurance test."""

from radio_stress.models.result import RunMetrics


class RadioStressError(Exception):
    """Base class for all radio stress errors."""


class PreconditionError(RadioStressError):
    """Raised when the run cannot start with the given device and configuration."""


class BuildError(RadioStressError):
    """Raised when the build or test environment could not be prepared."""


class DeviceNotAvailableError(RadioStressError):
    """Raised when the device stops responding to control commands."""


class BootTimeoutError(DeviceNotAvailableError):
    """Raised when boot completion is not observed within the timeout."""


class NotificationDeliveryError(RadioStressError):
    """Raised by a notifier when a notification could not be delivered."""


class RunAbortedError(RadioStressError):
    """Raised when a fatal fault stops the endurance loop before it completes.

    The metrics accumulated up to the fault are attached so callers can still
    report them.
    """

    def __init__(self, message: str, metrics: RunMetrics) -> None:
        super().__init__(message)
        self.metrics = metrics


class RunFailedError(RadioStressError):
    """Signals listeners that a run completed with failed iterations."""
