from __future__ import annotations
import shutil
from pathlib import Path

import structlog

log = structlog.get_logger(__name__)


class LocalFSStorage:
    """
    One private directory per task:
      jobs/<task_id>/
        ├─ prog.<ext>   (submitted source, renamed/compiled in place)
        ├─ prog.in      (only when input was given)
        ├─ prog.out
        └─ prog.err
    """

    def __init__(self, jobs_dir: Path, keep: bool = False):
        # always absolute: the child process gets it as cwd
        self.jobs_dir = jobs_dir if jobs_dir.is_absolute() else jobs_dir.resolve()
        self.keep = keep

    def create_workspace(self, task_id: str) -> Path:
        p = self.jobs_dir / task_id
        p.mkdir(parents=True, exist_ok=False)
        return p

    def discard(self, workdir: Path) -> None:
        if self.keep:
            return
        shutil.rmtree(workdir, ignore_errors=True)
        log.debug("workspace_removed", workdir=str(workdir))
