"""
Mutual exclusion for structural menu writes.

- Structural mutations hold the lock of every menu they touch, acquired in
  sorted order so a cross-menu move cannot deadlock with its mirror image.
- A rebuild takes the registry exclusively: it waits for in-flight mutations
  to drain and blocks new ones until it finishes.
- Reads take no lock; they work on registry snapshots.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from threading import Condition, Lock


class MenuLocks:
    def __init__(self) -> None:
        self._guard = Lock()
        self._menu_locks: dict[str, Lock] = {}
        self._gate = Condition()
        self._active = 0
        self._exclusive = False

    def _lock_for(self, menu_name: str) -> Lock:
        with self._guard:
            lock = self._menu_locks.get(menu_name)
            if lock is None:
                lock = Lock()
                self._menu_locks[menu_name] = lock
            return lock

    @contextmanager
    def menus(self, *menu_names: str) -> Iterator[None]:
        """Serialize structural writes on the given menus."""
        with self._gate:
            while self._exclusive:
                self._gate.wait()
            self._active += 1

        locks = [self._lock_for(name) for name in sorted(set(menu_names))]
        acquired: list[Lock] = []
        try:
            for lock in locks:
                lock.acquire()
                acquired.append(lock)
            yield
        finally:
            for lock in reversed(acquired):
                lock.release()
            with self._gate:
                self._active -= 1
                self._gate.notify_all()

    @contextmanager
    def exclusive(self) -> Iterator[None]:
        """Hold the whole registry, e.g. for a rebuild."""
        with self._gate:
            while self._exclusive:
                self._gate.wait()
            self._exclusive = True
            while self._active:
                self._gate.wait()
        try:
            yield
        finally:
            with self._gate:
                self._exclusive = False
                self._gate.notify_all()
