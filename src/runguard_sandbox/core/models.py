from __future__ import annotations
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, PositiveInt, StrictBool, model_validator


class Outcome(str, Enum):
    SUCCESS = "SUCCESS"
    TIME_LIMIT = "TIME_LIMIT"
    RUNTIME_ERROR = "RUNTIME_ERROR"
    ABNORMAL_TERMINATION = "ABNORMAL_TERMINATION"
    INTERNAL_ERROR = "INTERNAL_ERROR"


@dataclass(frozen=True)
class ResourceLimits:
    """Ceilings handed to the guard program for one language."""
    time_seconds: int
    memory_kb: Optional[int]      # None -> no --memsize flag
    file_size_kb: int
    max_processes: int            # shared by every task running as the guard user
    stream_size_kb: int
    no_core: bool = True

    def override(self, values: Union[Dict[str, Any], "LimitOverrides"]) -> "ResourceLimits":
        """Copy with some fields replaced; raises ValueError (pydantic) on bad keys or values."""
        if not values:
            return self
        checked = LimitOverrides.model_validate(values)
        return replace(self, **checked.model_dump(exclude_unset=True))


class LimitOverrides(BaseModel):
    """A partial ResourceLimits, as written in limits.yaml."""
    model_config = ConfigDict(extra="forbid")

    time_seconds: Optional[PositiveInt] = None
    memory_kb: Optional[PositiveInt] = None
    file_size_kb: Optional[PositiveInt] = None
    max_processes: Optional[PositiveInt] = None
    stream_size_kb: Optional[PositiveInt] = None
    no_core: Optional[StrictBool] = None

    @model_validator(mode="after")
    def _only_memory_is_nullable(self) -> "LimitOverrides":
        # memory_kb: null drops --memsize; every other flag needs a value
        nulls = sorted(k for k in self.model_fields_set if k != "memory_kb" and getattr(self, k) is None)
        if nulls:
            raise ValueError(f"limit keys may not be null: {', '.join(nulls)}")
        return self


@dataclass(frozen=True)
class Classification:
    outcome: Outcome
    signal: int
    stderr: str


@dataclass
class ProcessOutput:
    stdout: str = ""
    stderr: str = ""
    returncode: Optional[int] = None
    elapsed_s: float = 0.0
    peak_memory_kb: int = 0
    internal_error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.internal_error is None
