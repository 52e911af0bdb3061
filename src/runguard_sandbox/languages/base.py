from __future__ import annotations
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Dict, List, Mapping, Sequence

import structlog

from ..core.models import ResourceLimits

if TYPE_CHECKING:
    from ..core.task import Task

log = structlog.get_logger(__name__)

DEFAULT_TOOLS: Dict[str, str] = {
    "python2": "/usr/bin/python2",
    "python3": "/usr/bin/python3",
    "java": "/usr/bin/java",
    "javac": "/usr/bin/javac",
    "gcc": "gcc",
    "g++": "g++",
    "matlab": "/usr/local/bin/matlab_exec_cli",
    "node": "/usr/bin/node",
}

COMPILE_ERROR_FILE = "compile.out"


def identity(raw: str) -> str:
    return raw


@dataclass
class Toolchain:
    """Where the compilers/interpreters live, plus how long a compile may take."""
    paths: Mapping[str, str] = field(default_factory=dict)
    compile_timeout_s: int = 30

    def path(self, tool: str) -> str:
        return self.paths.get(tool) or DEFAULT_TOOLS[tool]

    def compile(self, task: "Task", cmd: Sequence[str]) -> bool:
        """
        Run a compiler/checker in the task's workdir, stderr into a transient
        error file. On failure the file's text becomes the task's diagnostics.
        """
        err_path = task.workdir / COMPILE_ERROR_FILE
        try:
            with open(err_path, "wb") as err:
                proc = subprocess.run(
                    list(cmd),
                    cwd=str(task.workdir),
                    stdin=subprocess.DEVNULL,
                    stdout=subprocess.DEVNULL,
                    stderr=err,
                    timeout=self.compile_timeout_s,
                )
            diagnostics = err_path.read_text(encoding="utf-8", errors="replace")
        except subprocess.TimeoutExpired:
            task.compile_diagnostics = f"Compilation timed out after {self.compile_timeout_s} seconds"
            return False
        finally:
            err_path.unlink(missing_ok=True)

        log.debug("compiler_finished", task_id=task.task_id, cmd=list(cmd), rc=proc.returncode)
        if proc.returncode == 0:
            task.compile_diagnostics = ""
            return True
        task.compile_diagnostics = diagnostics or f"{cmd[0]} exited with status {proc.returncode}"
        return False


@dataclass(frozen=True)
class Language:
    """
    One supported language. The per-language behaviour lives in the three
    callables; the registry maps identifiers to these records.
    """
    name: str
    version: str
    limits: ResourceLimits
    source_name: str
    compile: Callable[["Task", Toolchain], None]
    run_argv: Callable[["Task", Toolchain], List[str]]
    filter_output: Callable[[str], str] = identity
    # admission tokens held while running (roughly the runtime's thread count)
    process_reservation: int = 1


def no_compile(task: "Task", toolchain: Toolchain) -> None:
    task.executable_path = task.source_path


def program_ref(task: "Task") -> str:
    # the guard runs with cwd = workdir, so a bare name is enough
    assert task.executable_path is not None
    return Path(task.executable_path).name
