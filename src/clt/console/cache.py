"""Bounded LRU cache and the process-wide render cache."""

from __future__ import annotations

import threading
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, Generic, Hashable, Iterator, TypeVar

from clt.console.config import DEFAULT_RENDER_CACHE_SIZE
from clt.console.render import Render, Size

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class LRUCache(Generic[K, V]):
    """Fixed-capacity cache evicting the least recently used entry.

    Recency order and values live in one ``OrderedDict`` (a hash index over
    a doubly linked recency list), so lookup, insertion and eviction are all
    O(1).  The most recently used key is kept at the end.

    A lock serializes every mutation so the recency order and the values
    stay consistent when several threads produce renders.
    """

    def __init__(self, capacity: int) -> None:
        if capacity <= 0:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self._capacity = capacity
        self._entries: OrderedDict[K, V] = OrderedDict()
        self._lock = threading.Lock()

    @property
    def capacity(self) -> int:
        return self._capacity

    def refer(self, key: K, factory: Callable[[], V]) -> V:
        """Return the value cached for *key*, computing it on a miss.

        A hit refreshes the key's recency.  A miss evicts the least recently
        used entry first when the cache is full, then stores the new value.
        """
        with self._lock:
            try:
                value = self._entries[key]
            except KeyError:
                pass
            else:
                self._entries.move_to_end(key)
                return value

        value = factory()

        with self._lock:
            if key in self._entries:
                # Another producer stored it while we were computing
                self._entries.move_to_end(key)
                return self._entries[key]
            if len(self._entries) >= self._capacity:
                self._entries.popitem(last=False)
            self._entries[key] = value
        return value

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __iter__(self) -> Iterator[K]:
        return iter(self.keys())

    def keys(self) -> list[K]:
        """Cached keys, least recently used first."""
        with self._lock:
            return list(self._entries)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()


# ---------------------------------------------------------------------------
# Render cache
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RenderCacheKey:
    state: Hashable
    preferred_size: Size | None


render_cache: LRUCache[RenderCacheKey, Render] = LRUCache(DEFAULT_RENDER_CACHE_SIZE)


def configure_render_cache(capacity: int) -> LRUCache[RenderCacheKey, Render]:
    """Replace the process-wide render cache with an empty one of *capacity*.

    Intended to be called once at process start, before any session runs.
    """
    global render_cache
    render_cache = LRUCache(capacity)
    return render_cache


def get_render_cache() -> LRUCache[RenderCacheKey, Render]:
    return render_cache
