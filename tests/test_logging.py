import pytest
from structlog.contextvars import get_contextvars

from runguard_sandbox.logging import bind_task, setup_logging
from runguard_sandbox.runner.process import ProcessRunner
from runguard_sandbox.services.task_service import TaskService


def test_bind_task_is_scoped():
    with bind_task("t-1", "python3"):
        assert get_contextvars()["task_id"] == "t-1"
        assert get_contextvars()["language"] == "python3"
    assert "task_id" not in get_contextvars()


def test_unknown_level_rejected():
    with pytest.raises(ValueError):
        setup_logging("chatty")


class RecordingRunner(ProcessRunner):
    def __init__(self):
        super().__init__()
        self.seen = []

    def run(self, cmd, workdir, stdin_text="", reservation=1):
        self.seen.append(dict(get_contextvars()))
        return super().run(cmd, workdir, stdin_text=stdin_text, reservation=reservation)


def test_run_task_binds_task_context(settings):
    runner = RecordingRunner()
    task = TaskService(settings=settings, runner=runner).run_task("python3", "print(1)\n")
    assert runner.seen == [{"task_id": task.task_id, "language": "python3"}]
    assert "task_id" not in get_contextvars()
