"""
Process-lifetime cache of rendered image previews.

Entries are immutable tuples of lines; the empty tuple records a rejected
preview so a known-bad URL is not fetched again at the same key. Without a
capacity the cache only grows; with one it evicts least recently used keys.
"""
from __future__ import annotations

import threading
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, Iterable

REJECTED: tuple[str, ...] = ()


@dataclass(frozen=True)
class PreviewKey:
    url: str
    width: int
    max_lines: int
    backend: str


class PreviewCache:
    """
    Thread-safe preview cache.

    get_or_compute() runs the compute function at most once per key even when
    several workers ask for the same key at the same time.
    """

    def __init__(self, capacity: int | None = None) -> None:
        if capacity is not None and capacity <= 0:
            raise ValueError("capacity must be positive or None")
        self._capacity = capacity
        self._entries: OrderedDict[PreviewKey, tuple[str, ...]] = OrderedDict()
        self._lock = threading.Lock()
        self._key_locks: dict[PreviewKey, threading.Lock] = {}
        self.hits = 0
        self.misses = 0

    @property
    def capacity(self) -> int | None:
        return self._capacity

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    def get(self, key: PreviewKey) -> tuple[str, ...] | None:
        with self._lock:
            return self._lookup(key)

    def put(self, key: PreviewKey, lines: Iterable[str]) -> tuple[str, ...]:
        """Store lines under key unless an entry already exists; return the stored value."""
        value = tuple(lines)
        with self._lock:
            existing = self._entries.get(key)
            if existing is not None:
                return existing
            self._entries[key] = value
            self._evict()
            return value

    def get_or_compute(
        self,
        key: PreviewKey,
        compute: Callable[[], Iterable[str]],
    ) -> tuple[str, ...]:
        with self._lock:
            cached = self._lookup(key)
            if cached is not None:
                return cached
            key_lock = self._key_locks.setdefault(key, threading.Lock())

        with key_lock:
            with self._lock:
                cached = self._entries.get(key)
                if cached is not None:
                    return cached
            try:
                value = self.put(key, compute())
            finally:
                with self._lock:
                    self._key_locks.pop(key, None)
            return value

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def _lookup(self, key: PreviewKey) -> tuple[str, ...] | None:
        cached = self._entries.get(key)
        if cached is None:
            self.misses += 1
            return None
        self.hits += 1
        self._entries.move_to_end(key)
        return cached

    def _evict(self) -> None:
        if self._capacity is None:
            return
        while len(self._entries) > self._capacity:
            self._entries.popitem(last=False)
