from __future__ import annotations
import shutil
from typing import List

from ..core.models import ResourceLimits
from ..core.task import Task
from .base import Language, Toolchain

BANNER_END = "For product information, visit www.mathworks.com."


def strip_banner(raw: str, marker: str = BANNER_END) -> str:
    """
    Drop everything up to and including the line holding `marker`, then the
    blank lines around what is left. Lines are right-stripped; the result
    ends with exactly one newline.
    """
    lines: List[str] = []
    header_ended = False
    for line in raw.split("\n"):
        line = line.rstrip()
        if header_ended:
            lines.append(line)
        elif marker in line:
            header_ended = True

    while lines and not lines[0]:
        lines.pop(0)
    while lines and not lines[-1]:
        lines.pop()
    return "\n".join(lines) + "\n"


def _compile(task: Task, toolchain: Toolchain) -> None:
    # `matlab -r prog` looks for prog.m in the current directory
    script = task.source_path.with_name(task.source_path.name + ".m")
    shutil.copyfile(task.source_path, script)
    task.executable_path = script


def _run_argv(task: Task, toolchain: Toolchain) -> List[str]:
    return [toolchain.path("matlab"), "-nojvm", "-r", task.source_path.name]


MATLAB = Language(
    name="matlab",
    version="Matlab R2012",
    limits=ResourceLimits(
        time_seconds=15,
        memory_kb=None,      # Matlab won't start with --memsize set
        file_size_kb=1000000,
        max_processes=200,
        stream_size_kb=1000,
    ),
    source_name="prog",
    compile=_compile,
    run_argv=_run_argv,
    filter_output=strip_banner,
    process_reservation=50,
)
