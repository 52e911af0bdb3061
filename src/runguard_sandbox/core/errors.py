from __future__ import annotations
from typing import TYPE_CHECKING, Iterable

if TYPE_CHECKING:
    from .task import Task


class SandboxError(Exception):
    pass


class UnsupportedLanguageError(SandboxError):
    def __init__(self, language: str, supported: Iterable[str] = ()):
        self.language = language
        self.supported = list(supported)
        msg = f"language '{language}' is not supported"
        if self.supported:
            msg += f" (supported: {', '.join(self.supported)})"
        super().__init__(msg)


class CompileError(SandboxError):
    def __init__(self, diagnostics: str):
        self.diagnostics = diagnostics
        super().__init__(diagnostics)


class ExecutionError(SandboxError):
    """Base for failures recorded on a task after it was run."""

    def __init__(self, task: "Task", message: str = ""):
        self.task = task
        super().__init__(message or (task.result.value if task.result else "not run"))


class TimeLimitExceeded(ExecutionError):
    pass


class TaskRuntimeError(ExecutionError):
    pass


class AbnormalTermination(ExecutionError):
    pass


class InternalError(ExecutionError):
    pass
