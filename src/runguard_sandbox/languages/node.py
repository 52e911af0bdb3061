from __future__ import annotations
from typing import List

from ..core.models import ResourceLimits
from ..core.task import Task
from .base import Language, Toolchain, no_compile, program_ref


def _run_argv(task: Task, toolchain: Toolchain) -> List[str]:
    return [toolchain.path("node"), program_ref(task)]


NODEJS = Language(
    name="nodejs",
    version="Node.js",
    limits=ResourceLimits(
        time_seconds=10,
        memory_kb=None,      # V8 reserves far more address space than it uses
        file_size_kb=10000,
        max_processes=200,
        stream_size_kb=1000,
    ),
    source_name="prog.js",
    compile=no_compile,
    run_argv=_run_argv,
    process_reservation=10,
)
