import threading

import pytest

from lumo_api.errors import BusyError
from lumo_api.orchestrator.guard import SingleFlightGuard


def test_second_acquire_is_rejected_until_release() -> None:
    guard = SingleFlightGuard()

    assert guard.acquire() is True
    assert guard.busy is True
    assert guard.acquire() is False

    guard.release()
    assert guard.busy is False
    assert guard.acquire() is True
    guard.release()


def test_hold_raises_busy_without_blocking() -> None:
    guard = SingleFlightGuard()

    with guard.hold():
        with pytest.raises(BusyError):
            with guard.hold():
                pass  # pragma: no cover - never admitted
    assert guard.busy is False


def test_hold_releases_on_exception() -> None:
    guard = SingleFlightGuard()

    with pytest.raises(ValueError):
        with guard.hold():
            raise ValueError("boom")

    assert guard.busy is False


def test_racing_callers_admit_exactly_one() -> None:
    guard = SingleFlightGuard()
    barrier = threading.Barrier(8)
    results: list[bool] = []
    results_lock = threading.Lock()

    def contender() -> None:
        barrier.wait()
        admitted = guard.acquire()
        with results_lock:
            results.append(admitted)

    threads = [threading.Thread(target=contender) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=5)

    assert results.count(True) == 1
    assert results.count(False) == 7
