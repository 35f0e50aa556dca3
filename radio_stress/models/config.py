"""Configuration of a single endurance run."""

from pydantic import Field, field_validator

from radio_stress.models.base import Model

DEFAULT_TEST_NAME = "RadioStartupStress"


class InstrumentationTarget(Model):
    """Identity of the instrumented voice call test on the device."""

    package: str = Field(
        default="com.android.phonetests",
        description="Package containing the instrumentation test",
    )
    runner: str = Field(
        default="com.android.phonetests.PhoneInstrumentationStressTestRunner",
        description="Instrumentation runner class",
    )
    class_name: str = Field(
        default="com.android.phonetests.stress.telephony.TelephonyStress",
        description="Test class to run",
    )
    method: str = Field(default="testCall", description="Test method to run")


class EnduranceRun(Model):
    """Configuration snapshot for one endurance run."""

    iterations: int = Field(
        default=100, ge=1, description="The number of times to run the tests"
    )
    call_duration: str = Field(
        default="5",
        description="The time of a call to be held in the test (in seconds)",
    )
    phone_number: str | None = Field(
        default=None, description="The phone number used for outgoing call test"
    )
    non_voice_devices: frozenset[str] = Field(
        default_factory=frozenset,
        description="Product types that are not voice capable",
    )
    boot_timeout: float = Field(default=300, gt=0, description="Boot wait (s)")
    available_timeout: float = Field(
        default=300, gt=0, description="Device availability wait (s)"
    )
    settle_delay: float = Field(
        default=180,
        ge=0,
        description="Pause after the voice call so the data call can be set up (s)",
    )
    capture_timeout: float = Field(
        default=600, gt=0, description="Bug report capture limit (s)"
    )
    test_name: str = Field(
        default=DEFAULT_TEST_NAME,
        description="Descriptive name attached to diagnostic snapshots",
    )
    metrics_name: str = Field(
        default=DEFAULT_TEST_NAME, description="Name of the reported metrics run"
    )
    instrumentation: InstrumentationTarget = Field(
        default_factory=InstrumentationTarget
    )

    @field_validator("call_duration", mode="before")
    @classmethod
    def _validate_call_duration(cls, value: object) -> str:
        if isinstance(value, bool):
            raise ValueError("call duration must be a whole number of seconds")
        text = str(value).strip()
        if not text.isdigit():
            raise ValueError(
                f"call duration must be a non-negative integer, got {value!r}"
            )
        return text

    @field_validator("phone_number")
    @classmethod
    def _validate_phone_number(cls, value: str | None) -> str | None:
        if value is not None and not value.strip():
            raise ValueError("phone number must not be blank")
        return value

    @field_validator("non_voice_devices", mode="before")
    @classmethod
    def _split_device_list(cls, value: object) -> object:
        if isinstance(value, str):
            return frozenset(s.strip() for s in value.split(",") if s.strip())
        return value
