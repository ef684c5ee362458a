import threading
import time

import pytest

from app.core.exceptions import StoreUnavailableError
from app.services.schedule_locks import KeyedLockRegistry, class_day_key, entry_key, teacher_day_key


def test_keys_are_scoped_by_kind_and_day():
    assert teacher_day_key("t1", 1) != teacher_day_key("t1", 2)
    assert teacher_day_key("x", 1) != class_day_key("x", 1)
    assert entry_key("e1") == "entry:e1"


def test_hold_serializes_check_then_act():
    registry = KeyedLockRegistry()
    booked: list[int] = []
    barrier = threading.Barrier(8)

    def book(worker: int) -> None:
        barrier.wait()
        with registry.hold([teacher_day_key("t1", 1)], timeout=5):
            if not booked:
                time.sleep(0.01)
                booked.append(worker)

    threads = [threading.Thread(target=book, args=(n,)) for n in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(booked) == 1
    assert registry.active_keys() == set()


def test_hold_times_out_while_key_is_taken():
    registry = KeyedLockRegistry()
    key = class_day_key("c1", 3)
    with registry.hold([key], timeout=1):
        with pytest.raises(StoreUnavailableError) as excinfo:
            with registry.hold([key], timeout=0.05):
                pass
    assert excinfo.value.details["lock"] == key
    assert excinfo.value.details["retryable"] is True
    assert registry.active_keys() == set()


def test_acquire_adds_keys_released_with_the_block():
    registry = KeyedLockRegistry()
    with registry.hold([entry_key("e1")], timeout=1) as held:
        held.acquire([teacher_day_key("t1", 1), class_day_key("c1", 1), entry_key("e1")])
        assert set(held.keys) == {entry_key("e1"), teacher_day_key("t1", 1), class_day_key("c1", 1)}
        assert registry.active_keys() == set(held.keys)
    assert registry.active_keys() == set()


def test_partial_acquisition_is_released_on_timeout():
    registry = KeyedLockRegistry()
    blocker = teacher_day_key("t9", 1)
    with registry.hold([blocker], timeout=1):
        with pytest.raises(StoreUnavailableError):
            with registry.hold([class_day_key("a", 1), blocker], timeout=0.05):
                pass
        assert registry.active_keys() == {blocker}
