import pytest

from runguard_sandbox.core.models import Outcome
from runguard_sandbox.runner.classify import classify


def test_empty_stderr_is_success():
    c = classify("")
    assert (c.outcome, c.signal, c.stderr) == (Outcome.SUCCESS, 0, "")


def test_timelimit_marker():
    c = classify("runguard: warning: timelimit exceeded (wall time): aborting command\n")
    assert c.outcome == Outcome.TIME_LIMIT
    assert c.signal == 9
    assert c.stderr == ""


def test_segfault_marker():
    c = classify("runguard: warning: command terminated with signal 11\n")
    assert c.outcome == Outcome.RUNTIME_ERROR
    assert c.signal == 11
    assert c.stderr == ""


def test_marker_at_start_of_stderr_still_matches():
    assert classify("timelimit exceeded").outcome == Outcome.TIME_LIMIT


def test_timelimit_wins_over_segfault():
    c = classify("command terminated with signal 11\ntimelimit exceeded\n")
    assert c.outcome == Outcome.TIME_LIMIT


@pytest.mark.parametrize("stderr", [
    "Traceback (most recent call last):\nZeroDivisionError: division by zero\n",
    "runguard: warning: command terminated with signal 6\n",
    "DeprecationWarning: harmless\n",
    "\n",
])
def test_anything_else_is_abnormal_and_kept(stderr):
    c = classify(stderr)
    assert c.outcome == Outcome.ABNORMAL_TERMINATION
    assert c.signal == 0
    assert c.stderr == stderr


def test_classification_is_deterministic():
    text = "runguard: warning: timelimit exceeded\n"
    assert classify(text) == classify(text)
