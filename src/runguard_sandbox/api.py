from __future__ import annotations
from functools import lru_cache
from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException
from pydantic import BaseModel

from .core.errors import UnsupportedLanguageError
from .core.task import Task
from .logging import setup_logging
from .services.task_service import TaskService
from .settings import load_settings

app = FastAPI(title="Runguard Sandbox API")


@lru_cache
def get_service() -> TaskService:
    settings = load_settings()
    setup_logging(settings.log_level, json_logs=settings.log_json)
    return TaskService(settings=settings)


# --------- Schemas ---------
class RunReq(BaseModel):
    language: str
    source: str
    stdin: str = ""


class RunRes(BaseModel):
    language: str
    version: str
    outcome: Optional[str] = None      # None when compilation failed
    signal: int = 0
    stdout: str = ""
    stderr: str = ""
    compile_diagnostics: str = ""
    elapsed_time: float = 0.0
    peak_memory: int = 0

    @classmethod
    def from_task(cls, task: Task) -> "RunRes":
        return cls(
            language=task.language.name,
            version=task.version,
            outcome=task.result.value if task.result else None,
            signal=task.signal,
            stdout=task.stdout,
            stderr=task.stderr,
            compile_diagnostics=task.compile_diagnostics,
            elapsed_time=task.elapsed_time,
            peak_memory=task.peak_memory,
        )


class LanguagesRes(BaseModel):
    languages: List[str]


# --------- Endpoints ---------

@app.get("/health")
def health():
    return {"ok": True}


@app.get("/languages", response_model=LanguagesRes)
def languages(svc: TaskService = Depends(get_service)):
    return LanguagesRes(languages=svc.languages())


# sync handler: FastAPI runs it in its threadpool, one blocking run per request
@app.post("/runs", response_model=RunRes)
def run(req: RunReq, svc: TaskService = Depends(get_service)):
    try:
        task = svc.run_task(req.language, req.source, req.stdin)
    except UnsupportedLanguageError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return RunRes.from_task(task)
