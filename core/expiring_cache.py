# core/expiring_cache.py

"""
In-process keyed cache with time-to-idle eviction.

An entry expires once it has gone `time_to_idle` seconds without being read or written. An optional
`max_entries` ceiling evicts the least recently touched entry when exceeded.

All operations hold one lock, and `update()` runs its merge function under that lock, which makes
read-modify-write cycles on a key atomic with respect to every other caller.
"""

from __future__ import annotations

import time
from collections import OrderedDict
from threading import RLock
from typing import Callable, Generic, Optional, TypeVar

V = TypeVar("V")


class IdleExpiringCache(Generic[V]):

    def __init__(
        self,
        time_to_idle: float = 10.0,
        max_entries: int | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        if time_to_idle <= 0:
            raise ValueError("time_to_idle must be greater than zero.")
        if max_entries is not None and max_entries < 1:
            raise ValueError("max_entries must be at least 1, or None for unbounded.")

        self._time_to_idle = time_to_idle
        self._max_entries = max_entries
        self._clock = clock
        # key -> (value, last touched), least recently touched first
        self._entries: OrderedDict[str, tuple[V, float]] = OrderedDict()
        self._lock = RLock()

    @property
    def time_to_idle(self) -> float:
        return self._time_to_idle

    @property
    def max_entries(self) -> int | None:
        return self._max_entries

    def get(self, key: str) -> Optional[V]:
        with self._lock:
            now = self._clock()
            self._purge_expired(now)
            entry = self._entries.get(key)
            if entry is None:
                return None
            self._touch(key, entry[0], now)
            return entry[0]

    def put(self, key: str, value: V) -> None:
        with self._lock:
            now = self._clock()
            self._purge_expired(now)
            self._touch(key, value, now)
            self._enforce_ceiling()

    def update(self, key: str, fn: Callable[[Optional[V]], V]) -> V:
        with self._lock:
            now = self._clock()
            self._purge_expired(now)
            entry = self._entries.get(key)
            value = fn(entry[0] if entry else None)
            self._touch(key, value, now)
            self._enforce_ceiling()
            return value

    def remove(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            self._purge_expired(self._clock())
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            self._purge_expired(self._clock())
            return key in self._entries

    # === helper methods ===

    def _touch(self, key: str, value: V, now: float) -> None:
        self._entries[key] = (value, now)
        self._entries.move_to_end(key)

    def _purge_expired(self, now: float) -> None:
        # entries are ordered by last touch, so expired ones sit at the front
        while self._entries:
            key, (_, touched) = next(iter(self._entries.items()))
            if now - touched < self._time_to_idle:
                break
            del self._entries[key]

    def _enforce_ceiling(self) -> None:
        if self._max_entries is None:
            return
        while len(self._entries) > self._max_entries:
            self._entries.popitem(last=False)
