"""Tests for the endurance run configuration."""

import pytest
from pydantic import ValidationError

from radio_stress.models.config import EnduranceRun


def test_defaults() -> None:
    """Defaults match the standard stress run."""
    config = EnduranceRun()

    assert config.iterations == 100
    assert config.call_duration == "5"
    assert config.phone_number is None
    assert config.non_voice_devices == frozenset()
    assert config.settle_delay == 180
    assert config.test_name == "RadioStartupStress"
    assert config.metrics_name == "RadioStartupStress"


@pytest.mark.parametrize("iterations", [0, -1])
def test_rejects_non_positive_iterations(iterations: int) -> None:
    """At least one iteration is required."""
    with pytest.raises(ValidationError):
        EnduranceRun(iterations=iterations)


@pytest.mark.parametrize(("value", "expected"), [("30", "30"), (30, "30"), ("0", "0")])
def test_call_duration_is_string_encoded(value: object, expected: str) -> None:
    """Call duration is kept as a string of a whole number of seconds."""
    assert EnduranceRun(call_duration=value).call_duration == expected


@pytest.mark.parametrize("value", ["-5", "five", "1.5", "", True])
def test_rejects_invalid_call_duration(value: object) -> None:
    """Call duration must be a non-negative integer."""
    with pytest.raises(ValidationError, match="call duration"):
        EnduranceRun(call_duration=value)


def test_rejects_blank_phone_number() -> None:
    """A blank phone number is not a phone number."""
    with pytest.raises(ValidationError, match="phone number"):
        EnduranceRun(phone_number="  ")


@pytest.mark.parametrize(
    "value",
    ["wingray, stingray", ["wingray", "stingray"], frozenset({"wingray", "stingray"})],
)
def test_non_voice_devices_accepts_lists(value: object) -> None:
    """The non voice list may be a comma separated string or a collection."""
    config = EnduranceRun(non_voice_devices=value)

    assert config.non_voice_devices == frozenset({"wingray", "stingray"})


def test_is_immutable() -> None:
    """The configuration cannot change once the run starts."""
    config = EnduranceRun()

    with pytest.raises(ValidationError):
        config.iterations = 5  # type: ignore[misc]


def test_rejects_unknown_fields() -> None:
    """Misspelled options are reported instead of ignored."""
    with pytest.raises(ValidationError):
        EnduranceRun.model_validate({"iteration": 5})
