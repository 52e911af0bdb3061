"""Shared fixtures.

The real runguard needs root and a dedicated user, so tests use stand-ins:
`fake_guard` drops the guard flags and execs the wrapped program,
`marker_guard` just prints a diagnostic line to stderr the way runguard does.
"""

import os
import stat
import sys
from pathlib import Path

import pytest

from runguard_sandbox.languages.base import Toolchain
from runguard_sandbox.runner.admission import ProcessGate
from runguard_sandbox.runner.process import ProcessRunner
from runguard_sandbox.services.task_service import TaskService
from runguard_sandbox.settings import Settings

FAKE_GUARD = """\
import os, sys
args = sys.argv[1:]
while args and args[0].startswith("--"):
    args.pop(0)
os.execvp(args[0], args)
"""


def make_script(path: Path, body: str) -> Path:
    path.write_text(f"#!{sys.executable}\n{body}", encoding="utf-8")
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


@pytest.fixture
def fake_guard(tmp_path):
    return make_script(tmp_path / "runguard", FAKE_GUARD)


@pytest.fixture
def marker_guard(tmp_path):
    """Factory: a guard that writes `text` to stderr and runs nothing."""
    def _make(text: str) -> Path:
        body = f"import sys\nsys.stderr.write({text!r})\n"
        return make_script(tmp_path / "marker_guard", body)
    return _make


@pytest.fixture
def make_tool(tmp_path):
    """Factory for stand-in compilers: a python script named `name`."""
    bindir = tmp_path / "bin"
    bindir.mkdir()

    def _make(name: str, body: str) -> Path:
        return make_script(bindir / name, body)
    return _make


@pytest.fixture
def workdir(tmp_path):
    d = tmp_path / "work"
    d.mkdir()
    return d


@pytest.fixture
def toolchain():
    return Toolchain(paths={"python2": sys.executable, "python3": sys.executable})


@pytest.fixture
def settings(tmp_path, fake_guard):
    return Settings(
        jobs_dir=tmp_path / "jobs",
        guard_path=fake_guard,
        guard_user=os.environ.get("USER", "nobody"),
        runtimes={"python2": sys.executable, "python3": sys.executable},
        admission_timeout_s=5,
        limits_file=tmp_path / "missing-limits.yaml",
    )


@pytest.fixture
def service(settings):
    runner = ProcessRunner(ProcessGate(settings.process_ceiling, timeout_s=5),
                           max_stdout_bytes=settings.max_stdout_bytes)
    return TaskService(settings=settings, runner=runner)
