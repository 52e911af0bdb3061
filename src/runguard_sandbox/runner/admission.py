from __future__ import annotations
import threading
import time
from contextlib import contextmanager
from typing import Iterator, Optional

import structlog

log = structlog.get_logger(__name__)


class AdmissionRejected(Exception):
    pass


class ProcessGate:
    """
    Token pool mirroring the guard's --nproc ceiling.

    runguard limits processes per user, and every task runs as the same user,
    so all concurrent tasks share one ceiling. Each run reserves tokens for the
    processes/threads it expects to start; runs that don't fit wait (up to
    `timeout_s`) instead of failing inside the guard.
    """

    def __init__(self, capacity: int, timeout_s: Optional[float] = None):
        if capacity < 1:
            raise ValueError("capacity must be positive")
        self.capacity = capacity
        self.timeout_s = timeout_s
        self._in_use = 0
        self._cond = threading.Condition()

    @property
    def in_use(self) -> int:
        with self._cond:
            return self._in_use

    @property
    def available(self) -> int:
        with self._cond:
            return self.capacity - self._in_use

    @contextmanager
    def reserve(self, tokens: int = 1) -> Iterator[None]:
        if tokens < 1:
            raise ValueError(f"reservation must be positive, got {tokens}")
        if tokens > self.capacity:
            raise AdmissionRejected(
                f"reservation of {tokens} exceeds process ceiling {self.capacity}")
        start = time.monotonic()
        with self._cond:
            admitted = self._cond.wait_for(
                lambda: self._in_use + tokens <= self.capacity, timeout=self.timeout_s)
            if not admitted:
                log.warning("admission_rejected", tokens=tokens, in_use=self._in_use,
                            capacity=self.capacity)
                raise AdmissionRejected(
                    f"no process capacity for {tokens} slot(s) after "
                    f"{time.monotonic() - start:.1f}s ({self._in_use}/{self.capacity} in use)")
            self._in_use += tokens
        try:
            yield
        finally:
            with self._cond:
                self._in_use -= tokens
                self._cond.notify_all()


_shared: Optional[ProcessGate] = None
_shared_lock = threading.Lock()


def shared_gate(capacity: int, timeout_s: Optional[float] = None) -> ProcessGate:
    """The process-wide gate; the first caller fixes its capacity and timeout."""
    global _shared
    with _shared_lock:
        if _shared is None:
            _shared = ProcessGate(capacity, timeout_s)
            return _shared
        if _shared.capacity != capacity:
            log.warning("shared_gate_capacity_mismatch", existing=_shared.capacity,
                        requested=capacity)
        if _shared.timeout_s != timeout_s:
            log.warning("shared_gate_timeout_mismatch", existing=_shared.timeout_s,
                        requested=timeout_s)
        return _shared
