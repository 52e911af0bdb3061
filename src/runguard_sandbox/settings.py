from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic_settings import BaseSettings, SettingsConfigDict

from .core.models import LimitOverrides


class Settings(BaseSettings):
    # ---- paths ----
    jobs_dir: Path = Path("/srv/sbx/jobs")
    keep_workdirs: bool = False

    # ---- guard program ----
    guard_path: Path = Path("/usr/local/bin/runguard")
    guard_user: str = "coderunner"

    # ---- admission control: size of the shared --nproc ceiling ----
    process_ceiling: int = 200
    admission_timeout_s: Optional[float] = 30.0   # None = wait forever, 0 = reject at once

    # ---- capture / compile ----
    max_stdout_bytes: int = 1024 * 1024
    compile_timeout_s: int = 30

    # ---- config files ----
    limits_file: Path = Path("conf/limits.yaml")

    # tool name -> binary, e.g. {"python3": "/opt/py/bin/python3"}
    runtimes: Dict[str, str] = {}
    # language id -> partial ResourceLimits, read from limits_file
    limits: Dict[str, LimitOverrides] = {}

    # ---- logging ----
    log_level: str = "INFO"
    log_json: bool = True

    # env prefix SBX_*
    model_config = SettingsConfigDict(env_prefix="SBX_", extra="ignore")


def _read_yaml(path: Path) -> Dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError:
        return {}
    return data if isinstance(data, dict) else {}


def load_settings(conf_file: Optional[Path] = None) -> Settings:
    # 0) base from SBX_* env
    s = Settings()

    # 1) conf/sandbox.yaml (or SANDBOX_CONF); its values win over env
    path = conf_file or Path(os.environ.get("SANDBOX_CONF", "conf/sandbox.yaml"))
    data = _read_yaml(path)
    known = {k: v for k, v in data.items() if k in Settings.model_fields}
    if known:
        s = Settings(**{**s.model_dump(exclude_unset=True), **known})

    # 2) per-language limits (optional)
    limits = {
        str(lang).lower(): LimitOverrides.model_validate(values)
        for lang, values in _read_yaml(s.limits_file).items()
        if isinstance(values, dict)
    }
    if limits:
        s = s.model_copy(update={"limits": {**s.limits, **limits}})
    return s
