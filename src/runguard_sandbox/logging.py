import logging
import sys
from typing import ContextManager, Union

import structlog


def _level(level: Union[int, str]) -> int:
    if isinstance(level, int):
        return level
    value = logging.getLevelName(level.strip().upper())
    if not isinstance(value, int):
        raise ValueError(f"unknown log level: {level!r}")
    return value


def setup_logging(level: Union[int, str] = "INFO", json_logs: bool = True):
    """
    Route structlog events to stdout, one JSON object per line.

    `json_logs=False` switches to the console renderer for local runs.
    Events pick up whatever `bind_task` put into the context, so runner and
    gate messages can be tied back to a task without passing ids around.
    """
    lvl = _level(level)
    logging.basicConfig(level=lvl, stream=sys.stdout, format="%(message)s")
    renderer = structlog.processors.JSONRenderer() if json_logs else structlog.dev.ConsoleRenderer()
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(lvl),
        cache_logger_on_first_use=True,
    )
    return structlog.get_logger("runguard_sandbox")


def bind_task(task_id: str, language: str) -> ContextManager[None]:
    return structlog.contextvars.bound_contextvars(task_id=task_id, language=language)
