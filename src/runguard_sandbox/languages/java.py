from __future__ import annotations
import re
from typing import List, Optional

from ..core.models import ResourceLimits
from ..core.task import Task
from .base import Language, Toolchain

# A public class followed (anywhere later) by `public static void main(String`.
# A regex, not a parser: a commented-out main class still counts.
MAIN_CLASS_RE = re.compile(
    r"(^|\W)public\s+class\s+(\w+)\s*\{.*?public\s+static\s+void\s+main\s*\(\s*String",
    re.MULTILINE | re.DOTALL,
)

NO_MAIN_CLASS = (
    "Error: no main class found, or multiple main classes. "
    "[Did you write a public class when asked for a non-public one?]"
)


def find_main_class(source: str) -> Optional[str]:
    """Name of the single public class with a main method, else None."""
    matches = MAIN_CLASS_RE.findall(source)
    if len(matches) != 1:
        return None
    return matches[0][1]


def _compile(task: Task, toolchain: Toolchain) -> None:
    main_class = find_main_class(task.source_path.read_text(encoding="utf-8"))
    if main_class is None:
        task.compile_diagnostics = NO_MAIN_CLASS
        return

    # javac insists the file is named after its public class
    renamed = task.source_path.rename(task.workdir / f"{main_class}.java")
    task.source_path = renamed
    task.main_class = main_class
    if toolchain.compile(task, [toolchain.path("javac"), renamed.name]):
        task.executable_path = renamed


def _run_argv(task: Task, toolchain: Toolchain) -> List[str]:
    return [
        toolchain.path("java"),
        "-Xrs",     # fewer JVM signal handlers, no thread dump when the guard kills it
        "-Xss8m",
        "-Xmx200m",
        task.main_class,
    ]


JAVA = Language(
    name="java",
    version="Java 1.6",
    limits=ResourceLimits(
        time_seconds=10,
        memory_kb=2000000,
        file_size_kb=10000,
        max_processes=200,
        stream_size_kb=1000,
    ),
    source_name="prog.java",
    compile=_compile,
    run_argv=_run_argv,
    process_reservation=20,
)
