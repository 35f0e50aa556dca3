"""Parser for the raw output of ``am instrument -r``."""

from collections.abc import Mapping

from radio_stress.models.result import InstrumentationOutcome

STATUS_PREFIX = "INSTRUMENTATION_STATUS: "
STATUS_CODE_PREFIX = "INSTRUMENTATION_STATUS_CODE: "
RESULT_PREFIX = "INSTRUMENTATION_RESULT: "
CODE_PREFIX = "INSTRUMENTATION_CODE: "
FAILED_PREFIX = "INSTRUMENTATION_FAILED: "

STATUS_START = 1
STATUS_ERROR = -1
STATUS_FAILURE = -2


def _test_id(status: Mapping[str, str]) -> str:
    return f"{status.get('class', '?')}#{status.get('test', '?')}"


def _to_int(value: str) -> int | None:
    try:
        return int(value.strip())
    except ValueError:
        return None


def parse_instrumentation_output(run_name: str, output: str) -> InstrumentationOutcome:
    """Summarize one instrumentation run from its raw status stream.

    A run that never printed a final ``INSTRUMENTATION_CODE`` (crash, early
    abort) counts as one error in addition to whatever completed.
    """
    status: dict[str, str] = {}
    last_key: str | None = None
    total = 0
    failed = 0
    errors = 0
    failures: dict[str, str] = {}
    completed = False

    for line in output.splitlines():
        if line.startswith(STATUS_PREFIX):
            key, _, value = line.removeprefix(STATUS_PREFIX).partition("=")
            status[key] = value
            last_key = key
        elif line.startswith(STATUS_CODE_PREFIX):
            raw_code = line.removeprefix(STATUS_CODE_PREFIX)
            code = _to_int(raw_code)
            if (numtests := _to_int(status.get("numtests", ""))) is not None:
                total = max(total, numtests)
            if code is None:
                errors += 1
                failures[_test_id(status)] = f"Unreadable status code: {raw_code!r}"
            elif code == STATUS_FAILURE:
                failed += 1
                failures[_test_id(status)] = status.get("stack", "")
            elif code == STATUS_ERROR:
                errors += 1
                failures[_test_id(status)] = status.get("stack", "")
            status = {} if code != STATUS_START else status
            last_key = None
        elif line.startswith(CODE_PREFIX):
            completed = True
        elif line.startswith((RESULT_PREFIX, FAILED_PREFIX)):
            last_key = None
            if line.startswith(FAILED_PREFIX):
                failures[run_name] = line.removeprefix(FAILED_PREFIX)
        elif last_key is not None:
            status[last_key] += "\n" + line

    if not completed:
        errors += 1
        failures.setdefault(run_name, "Instrumentation run did not complete")

    return InstrumentationOutcome(
        run_name=run_name,
        total=total,
        failed=failed,
        errors=errors,
        failures=failures,
    )
