from __future__ import annotations
import os
import subprocess
import time
from contextlib import ExitStack
from pathlib import Path
from typing import Optional, Sequence

import structlog

from ..core.models import ProcessOutput
from .admission import AdmissionRejected, ProcessGate

log = structlog.get_logger(__name__)

MAX_READ = 1024 * 1024  # bytes of prog.out read back into memory

STDIN_FILE = "prog.in"
STDOUT_FILE = "prog.out"
STDERR_FILE = "prog.err"


class ProcessRunner:
    def __init__(self, gate: Optional[ProcessGate] = None, max_stdout_bytes: int = MAX_READ):
        self.gate = gate
        self.max_stdout_bytes = max_stdout_bytes

    def run(
        self,
        cmd: Sequence[str],
        workdir: Path,
        stdin_text: str = "",
        reservation: int = 1,
    ) -> ProcessOutput:
        """
        Run an already-guarded command inside `workdir`.

        stdout/stderr go to files rather than pipes so a chatty program can't
        fill a pipe buffer and stall. Failures to spawn or to read the results
        come back as `ProcessOutput.internal_error`, never as exceptions.
        """
        try:
            if self.gate is None:
                return self._spawn(cmd, workdir, stdin_text)
            with self.gate.reserve(reservation):
                return self._spawn(cmd, workdir, stdin_text)
        except AdmissionRejected as e:
            return ProcessOutput(internal_error=f"AdmissionRejected: {e}")
        except Exception as e:
            log.error("spawn_failed", cmd=list(cmd), workdir=str(workdir), error=str(e))
            return ProcessOutput(internal_error=f"{type(e).__name__}: {e}")

    def _spawn(self, cmd: Sequence[str], workdir: Path, stdin_text: str) -> ProcessOutput:
        out_path = workdir / STDOUT_FILE
        err_path = workdir / STDERR_FILE

        with ExitStack() as stack:
            if stdin_text:
                in_path = workdir / STDIN_FILE
                in_path.write_text(stdin_text, encoding="utf-8")
                stdin = stack.enter_context(open(in_path, "rb"))
            else:
                stdin = subprocess.DEVNULL
            stdout = stack.enter_context(open(out_path, "wb"))
            stderr = stack.enter_context(open(err_path, "wb"))

            start = time.monotonic()
            proc = subprocess.Popen(
                list(cmd),
                cwd=str(workdir),
                stdin=stdin,
                stdout=stdout,
                stderr=stderr,
                close_fds=True,
            )
            # wait4 instead of proc.wait() so the rusage is this child's alone
            _, status, usage = os.wait4(proc.pid, 0)
            proc.returncode = os.waitstatus_to_exitcode(status)
            elapsed = time.monotonic() - start

        result = ProcessOutput(
            stdout=_read_prefix(out_path, self.max_stdout_bytes),
            stderr=err_path.read_text(encoding="utf-8", errors="replace") if err_path.exists() else "",
            returncode=proc.returncode,
            elapsed_s=elapsed,
            peak_memory_kb=int(usage.ru_maxrss),
        )
        log.info("process_finished", rc=result.returncode, elapsed_s=round(elapsed, 3),
                 peak_memory_kb=result.peak_memory_kb, stderr_bytes=len(result.stderr))
        return result


def _read_prefix(path: Path, limit: int) -> str:
    if not path.exists():
        return ""
    with open(path, "rb") as f:
        data = f.read(limit)
    return data.decode("utf-8", errors="replace")
