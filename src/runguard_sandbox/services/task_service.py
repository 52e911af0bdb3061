from __future__ import annotations
from typing import List, Optional

import structlog

from ..core.task import Task
from ..core.utils import new_task_id
from ..languages.base import Toolchain
from ..languages.registry import create_task, get_language, supported_languages
from ..logging import bind_task
from ..runner.admission import shared_gate
from ..runner.classify import classify
from ..runner.process import ProcessRunner
from ..settings import Settings, load_settings
from .storage import LocalFSStorage

log = structlog.get_logger(__name__)


class TaskService:
    """
    Factory + compile + guarded run + classification for one submission.
    Everything after the language lookup is recorded on the Task; only an
    unknown language raises.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        runner: Optional[ProcessRunner] = None,
        storage: Optional[LocalFSStorage] = None,
    ):
        self.settings = settings or load_settings()
        self.storage = storage or LocalFSStorage(self.settings.jobs_dir, keep=self.settings.keep_workdirs)
        self.toolchain = Toolchain(
            paths=dict(self.settings.runtimes),
            compile_timeout_s=self.settings.compile_timeout_s,
        )
        self.runner = runner or ProcessRunner(
            gate=shared_gate(self.settings.process_ceiling, self.settings.admission_timeout_s),
            max_stdout_bytes=self.settings.max_stdout_bytes,
        )

    def languages(self) -> List[str]:
        return supported_languages()

    def create_task(self, language: str, source: str) -> Task:
        lang = get_language(language)   # fail before touching the filesystem
        overrides = self.settings.limits.get(lang.name)
        lang.limits.override(overrides)   # bad limits.yaml entries too
        task_id = new_task_id()
        workdir = self.storage.create_workspace(task_id)
        try:
            return create_task(lang.name, source, workdir, task_id, limit_overrides=overrides)
        except BaseException:
            self.storage.discard(workdir)
            raise

    def compile(self, task: Task) -> Task:
        try:
            task.compile(self.toolchain)
        except Exception as e:
            task.fail_internal(f"{type(e).__name__}: {e}")
        return task

    def execute(self, task: Task, stdin: str = "") -> Task:
        if task.compile_diagnostics:
            return task
        task.reset_execution()
        try:
            cmd = task.run_command(self.settings.guard_path, self.settings.guard_user, self.toolchain)
        except Exception as e:
            task.fail_internal(f"{type(e).__name__}: {e}")
            return task

        output = self.runner.run(
            cmd, task.workdir, stdin_text=stdin,
            reservation=task.language.process_reservation,
        )
        if not output.ok:
            task.fail_internal(output.internal_error)
            return task

        try:
            task.record(classify(output.stderr), output)
        except Exception as e:
            task.fail_internal(f"{type(e).__name__}: {e}")
            return task

        log.info("task_finished", task_id=task.task_id, language=task.language.name,
                 result=task.result.value, signal=task.signal,
                 elapsed_s=round(task.elapsed_time, 3), peak_memory_kb=task.peak_memory)
        return task

    def run_task(self, language: str, source: str, stdin: str = "") -> Task:
        task = self.create_task(language, source)
        # runner and gate events carry the task through the bound context
        with bind_task(task.task_id, task.language.name):
            try:
                self.compile(task)
                self.execute(task, stdin)
            finally:
                self.storage.discard(task.workdir)
        return task
