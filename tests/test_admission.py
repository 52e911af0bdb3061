import threading
import time

import pytest

from runguard_sandbox.runner.admission import AdmissionRejected, ProcessGate, shared_gate


def test_reserve_and_release():
    gate = ProcessGate(10)
    with gate.reserve(4):
        assert gate.in_use == 4
        assert gate.available == 6
    assert gate.in_use == 0


def test_released_when_body_raises():
    gate = ProcessGate(10)
    with pytest.raises(KeyError):
        with gate.reserve(3):
            raise KeyError("x")
    assert gate.in_use == 0


def test_oversized_reservation_rejected():
    gate = ProcessGate(10)
    with pytest.raises(AdmissionRejected):
        with gate.reserve(11):
            pass


def test_full_gate_rejects_after_timeout():
    gate = ProcessGate(5, timeout_s=0.1)
    with gate.reserve(5):
        start = time.monotonic()
        with pytest.raises(AdmissionRejected):
            with gate.reserve(1):
                pass
        assert time.monotonic() - start >= 0.1
    assert gate.in_use == 0


def test_zero_timeout_rejects_immediately():
    gate = ProcessGate(2, timeout_s=0)
    with gate.reserve(2):
        with pytest.raises(AdmissionRejected):
            with gate.reserve(1):
                pass


def test_waiter_admitted_when_capacity_frees():
    gate = ProcessGate(20, timeout_s=5)
    holding = threading.Event()
    release = threading.Event()
    admitted = []

    def holder():
        with gate.reserve(20):
            holding.set()
            release.wait(5)

    def waiter():
        holding.wait(5)
        with gate.reserve(20):
            admitted.append(True)

    t1 = threading.Thread(target=holder)
    t2 = threading.Thread(target=waiter)
    t1.start()
    t2.start()
    holding.wait(5)
    time.sleep(0.05)
    assert admitted == []
    release.set()
    t1.join(5)
    t2.join(5)
    assert admitted == [True]
    assert gate.in_use == 0


def test_concurrent_reservations_never_exceed_capacity():
    gate = ProcessGate(10, timeout_s=10)
    peak = []
    lock = threading.Lock()

    def worker():
        with gate.reserve(3):
            with lock:
                peak.append(gate.in_use)
            time.sleep(0.01)

    threads = [threading.Thread(target=worker) for _ in range(12)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(10)
    assert max(peak) <= 10
    assert gate.in_use == 0


def test_shared_gate_is_process_wide():
    assert shared_gate(200) is shared_gate(200)


def test_capacity_must_be_positive():
    with pytest.raises(ValueError):
        ProcessGate(0)


@pytest.mark.parametrize("tokens", [0, -5])
def test_non_positive_reservation_rejected(tokens):
    gate = ProcessGate(2)
    with pytest.raises(ValueError):
        with gate.reserve(tokens):
            pass
    assert gate.in_use == 0
    assert gate.available == 2


def test_shared_gate_keeps_first_timeout():
    gate = shared_gate(200)
    again = shared_gate(200, timeout_s=12345.0)
    assert again is gate
    assert again.timeout_s != 12345.0
