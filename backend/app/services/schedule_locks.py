from __future__ import annotations

from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from threading import Lock
import logging

from app.core.exceptions import StoreUnavailableError

logger = logging.getLogger(__name__)


def teacher_day_key(teacher_id: str, day_of_week: int) -> str:
    return f"teacher:{teacher_id}:{day_of_week}"


def class_day_key(class_id: str, day_of_week: int) -> str:
    return f"class:{class_id}:{day_of_week}"


def entry_key(entry_id: str) -> str:
    return f"entry:{entry_id}"


class HeldLocks:
    """Locks taken inside one ``KeyedLockRegistry.hold`` block."""

    def __init__(self, registry: "KeyedLockRegistry", timeout: float) -> None:
        self._registry = registry
        self._timeout = timeout
        self._held: list[str] = []

    @property
    def keys(self) -> tuple[str, ...]:
        return tuple(self._held)

    def acquire(self, keys: Iterable[str]) -> None:
        # Sorted order within a batch keeps two overlapping batches from deadlocking.
        for key in sorted(set(keys) - set(self._held)):
            if not self._registry._acquire(key, self._timeout):
                logger.warning("Timed out after %.2fs waiting for schedule lock %s", self._timeout, key)
                raise StoreUnavailableError(
                    "Timed out waiting for a concurrent timetable change to finish",
                    details={"lock": key},
                )
            self._held.append(key)

    def release_all(self) -> None:
        while self._held:
            self._registry._release(self._held.pop())


class KeyedLockRegistry:
    """Process-wide mutual exclusion per (teacher, day), (class, day) and entry."""

    def __init__(self) -> None:
        self._guard = Lock()
        self._locks: dict[str, tuple[Lock, int]] = {}

    def _acquire(self, key: str, timeout: float) -> bool:
        with self._guard:
            lock, users = self._locks.get(key, (None, 0))
            if lock is None:
                lock = Lock()
            self._locks[key] = (lock, users + 1)
        if lock.acquire(timeout=timeout):
            return True
        self._forget(key)
        return False

    def _release(self, key: str) -> None:
        with self._guard:
            lock, _ = self._locks[key]
        lock.release()
        self._forget(key)

    def _forget(self, key: str) -> None:
        with self._guard:
            lock, users = self._locks[key]
            if users <= 1:
                del self._locks[key]
            else:
                self._locks[key] = (lock, users - 1)

    @contextmanager
    def hold(self, keys: Iterable[str] = (), *, timeout: float) -> Iterator[HeldLocks]:
        held = HeldLocks(self, timeout)
        try:
            held.acquire(keys)
            yield held
        finally:
            held.release_all()

    def active_keys(self) -> set[str]:
        with self._guard:
            return set(self._locks)


schedule_locks = KeyedLockRegistry()
