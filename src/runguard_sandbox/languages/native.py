from __future__ import annotations
from typing import List

from ..core.models import ResourceLimits
from ..core.task import Task
from .base import Language, Toolchain, program_ref

_LIMITS = ResourceLimits(
    time_seconds=5,
    memory_kb=100000,
    file_size_kb=10000,
    max_processes=200,
    stream_size_kb=1000,
)


def _gcc_compile(compiler: str, lang_flags: List[str]):
    def compile_(task: Task, toolchain: Toolchain) -> None:
        src = task.source_path.name
        exe = task.source_path.with_suffix(".exe")
        cmd = [toolchain.path(compiler), "-Wall", "-Werror", *lang_flags,
               "-o", exe.name, src, "-lm"]
        if toolchain.compile(task, cmd):
            task.executable_path = exe
    return compile_


def _run_argv(task: Task, toolchain: Toolchain) -> List[str]:
    return [f"./{program_ref(task)}"]


C = Language(
    name="c",
    version="gcc-4.6.3",
    limits=_LIMITS,
    source_name="prog.c",
    compile=_gcc_compile("gcc", ["-std=c99", "-x", "c"]),
    run_argv=_run_argv,
)

CPP = Language(
    name="cpp",
    version="g++-4.6.3",
    limits=_LIMITS,
    source_name="prog.cpp",
    compile=_gcc_compile("g++", ["-x", "c++"]),
    run_argv=_run_argv,
)
