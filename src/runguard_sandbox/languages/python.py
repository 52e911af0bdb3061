from __future__ import annotations
from typing import List

from ..core.models import ResourceLimits
from ..core.task import Task
from .base import Language, Toolchain, no_compile, program_ref


def _python3_compile(task: Task, toolchain: Toolchain) -> None:
    # check with the interpreter that will run the code so the messages match
    cmd = [toolchain.path("python3"), "-m", "py_compile", task.source_path.name]
    if toolchain.compile(task, cmd):
        task.executable_path = task.source_path


def _python2_argv(task: Task, toolchain: Toolchain) -> List[str]:
    return [toolchain.path("python2"), "-BESs", program_ref(task)]


def _python3_argv(task: Task, toolchain: Toolchain) -> List[str]:
    return [toolchain.path("python3"), "-BE", program_ref(task)]


PYTHON2 = Language(
    name="python2",
    version="Python 2.7",
    limits=ResourceLimits(
        time_seconds=3,
        memory_kb=100000,
        file_size_kb=10000,
        max_processes=200,
        stream_size_kb=1000,
    ),
    source_name="prog.py",
    compile=no_compile,
    run_argv=_python2_argv,
    process_reservation=2,
)

PYTHON3 = Language(
    name="python3",
    version="Python 3.2",
    limits=ResourceLimits(
        time_seconds=10,
        memory_kb=4000000,   # large enough for Python to start a JVM
        file_size_kb=10000,
        max_processes=200,
        stream_size_kb=1000,
    ),
    source_name="prog.py",
    compile=_python3_compile,
    run_argv=_python3_argv,
    process_reservation=2,
)
