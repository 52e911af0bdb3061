from __future__ import annotations

from ..core.models import Classification, Outcome

# runguard reports why it stopped the command only as free text on stderr
TIMELIMIT_MARKER = "timelimit exceeded"
SEGFAULT_MARKER = "command terminated with signal 11"


def classify(stderr: str) -> Classification:
    """
    Map the captured stderr of a guarded run to an outcome.

    Guard diagnostics are consumed (stderr cleared); anything else on stderr,
    even a harmless warning, counts as abnormal termination and is kept.
    """
    if not stderr:
        return Classification(Outcome.SUCCESS, 0, "")
    if TIMELIMIT_MARKER in stderr:
        return Classification(Outcome.TIME_LIMIT, 9, "")
    if SEGFAULT_MARKER in stderr:
        return Classification(Outcome.RUNTIME_ERROR, 11, "")
    return Classification(Outcome.ABNORMAL_TERMINATION, 0, stderr)
