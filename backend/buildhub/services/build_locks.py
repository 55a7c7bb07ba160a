"""Per-Build Locks — serializes log appends for the same build within a process.

Invariants:
    - At most one append-log save per build id at a time within this process
    - A lock lives only while some coroutine holds or awaits it

Design Decisions:
    - WeakValueDictionary: idle locks are collected, the registry never grows unbounded
    - In-process queue only; across worker processes the row lock and the
      single-UPDATE concatenation in BuildStore.append_to_log keep every chunk
"""

import asyncio
from weakref import WeakValueDictionary


class KeyedLocks:
    """asyncio.Lock registry keyed by build id."""

    def __init__(self) -> None:
        self._locks: WeakValueDictionary[int, asyncio.Lock] = WeakValueDictionary()

    def for_key(self, key: int) -> asyncio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        return lock

    def __len__(self) -> int:
        return len(self._locks)


log_append_locks = KeyedLocks()
