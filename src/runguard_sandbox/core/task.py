from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, List, Optional, Union

import structlog

from .errors import (
    AbnormalTermination,
    CompileError,
    InternalError,
    TaskRuntimeError,
    TimeLimitExceeded,
)
from .models import Classification, Outcome, ProcessOutput, ResourceLimits
from ..runner.command import build_guard_command

if TYPE_CHECKING:
    from ..languages.base import Language, Toolchain

log = structlog.get_logger(__name__)

_OUTCOME_ERRORS = {
    Outcome.TIME_LIMIT: TimeLimitExceeded,
    Outcome.RUNTIME_ERROR: TaskRuntimeError,
    Outcome.ABNORMAL_TERMINATION: AbnormalTermination,
    Outcome.INTERNAL_ERROR: InternalError,
}


@dataclass
class Task:
    """One compile + run of a single submission. Mutated in place, never persisted."""
    task_id: str
    language: "Language"
    workdir: Path
    source_path: Path
    limits: ResourceLimits

    executable_path: Optional[Path] = None
    main_class: Optional[str] = None   # JVM entry point, set by compile
    compile_diagnostics: str = ""

    result: Optional[Outcome] = None
    signal: int = 0
    elapsed_time: float = 0.0          # seconds
    peak_memory: int = 0               # KB
    stdout: str = ""
    stderr: str = ""

    @property
    def version(self) -> str:
        return self.language.version

    @property
    def compiled(self) -> bool:
        return self.executable_path is not None

    # ---------- language operations ----------

    def compile(self, toolchain: "Toolchain") -> None:
        # a failed compile is final; a successful one needn't be repeated
        if self.compile_diagnostics or self.compiled:
            return
        self.language.compile(self, toolchain)
        if self.compile_diagnostics:
            self.executable_path = None
            log.info("compile_failed", task_id=self.task_id, language=self.language.name,
                     diagnostics_bytes=len(self.compile_diagnostics))
        elif self.executable_path is None:
            raise RuntimeError(f"{self.language.name}: compile left no executable")

    def run_command(self, guard_path: Union[str, Path], user: str,
                    toolchain: "Toolchain") -> List[str]:
        if not self.compiled:
            raise RuntimeError("task must compile successfully before it can run")
        program = self.language.run_argv(self, toolchain)
        return build_guard_command(guard_path, user, self.limits, program)

    def filter_output(self, raw: str) -> str:
        return self.language.filter_output(raw)

    # ---------- result recording ----------

    def reset_execution(self) -> None:
        self.result = None
        self.signal = 0
        self.elapsed_time = 0.0
        self.peak_memory = 0
        self.stdout = ""
        self.stderr = ""

    def _set_result(self, outcome: Outcome) -> None:
        if self.result is not None:
            raise RuntimeError(f"result already set to {self.result.value}")
        self.result = outcome

    def record(self, classification: Classification, output: ProcessOutput) -> None:
        self._set_result(classification.outcome)
        self.signal = classification.signal
        self.stderr = classification.stderr
        self.elapsed_time = output.elapsed_s
        self.peak_memory = output.peak_memory_kb
        self.stdout = self.filter_output(output.stdout)

    def fail_internal(self, message: str) -> None:
        # overrides whatever a half-finished attempt left behind
        self.result = None
        self._set_result(Outcome.INTERNAL_ERROR)
        self.stdout = self.stderr = self.compile_diagnostics = message
        self.executable_path = None
        self.signal = 0
        self.elapsed_time = 0.0
        self.peak_memory = 0
        log.error("task_internal_error", task_id=self.task_id, language=self.language.name,
                  error=message)

    def raise_for_outcome(self) -> None:
        """Raise the matching SandboxError unless the task ran successfully."""
        if self.result is None:
            if self.compile_diagnostics:
                raise CompileError(self.compile_diagnostics)
            raise RuntimeError("task has not been run")
        exc = _OUTCOME_ERRORS.get(self.result)
        if exc is not None:
            raise exc(self, self.stderr or self.result.value)
