from __future__ import annotations
import time
import uuid


def new_task_id() -> str:
    return f"{int(time.time())}-{uuid.uuid4().hex[:12]}"
