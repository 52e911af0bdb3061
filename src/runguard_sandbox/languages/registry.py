from __future__ import annotations
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import structlog

from ..core.errors import UnsupportedLanguageError
from ..core.models import LimitOverrides
from ..core.task import Task
from .base import Language
from .java import JAVA
from .matlab import MATLAB
from .native import C, CPP
from .node import NODEJS
from .python import PYTHON2, PYTHON3

log = structlog.get_logger(__name__)

LANGUAGES: Dict[str, Language] = {
    lang.name: lang for lang in (MATLAB, PYTHON2, PYTHON3, JAVA, C, CPP, NODEJS)
}


def supported_languages() -> List[str]:
    return list(LANGUAGES)


def get_language(name: str) -> Language:
    # callers historically send 'Java' and 'C'
    lang = LANGUAGES.get((name or "").strip().lower())
    if lang is None:
        raise UnsupportedLanguageError(name, supported_languages())
    return lang


def create_task(
    language: str,
    source: str,
    workdir: Path,
    task_id: str,
    limit_overrides: Optional[Union[Dict[str, Any], LimitOverrides]] = None,
) -> Task:
    """Write `source` into `workdir` and wrap it in a Task for `language`."""
    lang = get_language(language)
    limits = lang.limits.override(limit_overrides or {})
    source_path = workdir / lang.source_name
    source_path.write_text(source, encoding="utf-8")
    log.info("task_created", task_id=task_id, language=lang.name, source_bytes=len(source))
    return Task(
        task_id=task_id,
        language=lang,
        workdir=workdir,
        source_path=source_path,
        limits=limits,
    )
