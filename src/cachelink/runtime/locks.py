"""
Per-type locks around connection record read-merge-write cycles.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager, nullcontext
from typing import ContextManager, Iterator


class TypeLocks:
    """
    One re-entrant lock per entity type name.

    Two writers touching the same type's list run one after the other.
    Different types only meet on the store's record write lock. A disabled
    instance hands out no-op contexts.
    """

    def __init__(self, enabled: bool = True):
        self.enabled = enabled
        self._locks: dict[str, threading.RLock] = {}
        self._guard = threading.Lock()

    def _lock_for(self, typename: str) -> threading.RLock:
        with self._guard:
            lock = self._locks.get(typename)
            if lock is None:
                lock = self._locks[typename] = threading.RLock()
            return lock

    def hold(self, typename: str) -> ContextManager[None]:
        if not self.enabled:
            return nullcontext()
        return self._held(typename)

    @contextmanager
    def _held(self, typename: str) -> Iterator[None]:
        with self._lock_for(typename):
            yield
