"""Test factories for generating test data."""

from polyfactory import Use
from polyfactory.factories import DataclassFactory
from polyfactory.factories.pydantic_factory import ModelFactory

from radio_stress.models.config import (
    DEFAULT_TEST_NAME,
    EnduranceRun,
    InstrumentationTarget,
)
from radio_stress.models.result import InstrumentationOutcome, IterationResult


class InstrumentationTargetFactory(ModelFactory[InstrumentationTarget]):
    """Factory for InstrumentationTarget."""


class EnduranceRunFactory(ModelFactory[EnduranceRun]):
    """Factory for EnduranceRun with timings suited to tests."""

    iterations = 3
    call_duration = "5"
    phone_number = "555-0100"
    non_voice_devices = Use(frozenset)
    test_name = DEFAULT_TEST_NAME
    metrics_name = DEFAULT_TEST_NAME
    boot_timeout = 1
    available_timeout = 1
    settle_delay = 0
    capture_timeout = 1


class IterationResultFactory(DataclassFactory[IterationResult]):
    """Factory for IterationResult."""

    __model__ = IterationResult


class InstrumentationOutcomeFactory(DataclassFactory[InstrumentationOutcome]):
    """Factory for a passing InstrumentationOutcome."""

    __model__ = InstrumentationOutcome

    total = 1
    failed = 0
    errors = 0
    failures = None
