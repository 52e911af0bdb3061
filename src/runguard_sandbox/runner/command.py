from __future__ import annotations
from pathlib import Path
from typing import List, Sequence, Union

from ..core.models import ResourceLimits


def build_guard_command(
    guard_path: Union[str, Path],
    user: str,
    limits: ResourceLimits,
    program: Sequence[str],
) -> List[str]:
    """
    Wrap `program` in the runguard invocation. The flag order is part of the
    guard's CLI contract:
      guard --user --time [--memsize] --filesize --nproc [--no-core] --streamsize <program...>
    """
    cmd = [
        str(guard_path),
        f"--user={user}",
        f"--time={limits.time_seconds}",
    ]
    # some runtimes (Matlab, V8) refuse to start under an address-space cap
    if limits.memory_kb is not None:
        cmd.append(f"--memsize={limits.memory_kb}")
    cmd += [
        f"--filesize={limits.file_size_kb}",
        f"--nproc={limits.max_processes}",
    ]
    if limits.no_core:
        cmd.append("--no-core")
    cmd.append(f"--streamsize={limits.stream_size_kb}")
    return cmd + list(program)
