"""Fold voice and data verification results into an iteration verdict."""

from radio_stress.models.result import IterationResult


def combine(voice_applicable: bool, voice_ok: bool | None, data_ok: bool) -> bool:
    """Return the combined success of one iteration.

    When voice applies both channels must pass. Otherwise only the data
    result counts and ``voice_ok`` is ignored.
    """
    if not voice_applicable:
        return data_ok
    return bool(voice_ok) and data_ok


def classify(
    index: int, voice_applicable: bool, voice_ok: bool | None, data_ok: bool
) -> IterationResult:
    """Build the iteration result for one pass of the loop."""
    return IterationResult(
        index=index,
        voice_applicable=voice_applicable,
        voice_verified=voice_ok if voice_applicable else None,
        data_verified=data_ok,
        success=combine(voice_applicable, voice_ok, data_ok),
    )
