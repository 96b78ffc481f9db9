"""In-process implementation of CacheStore.

The default store: a dictionary guarded by a lock. An optional capacity
bound turns it into an LRU cache (least recently read or written entry is
evicted first).
"""

import threading
from collections import OrderedDict

from kisah_ai.config import settings
from kisah_ai.entities import CacheEntryEntity


class InMemoryCacheRepository:
    """Dictionary-backed store satisfying the CacheStore protocol."""

    def __init__(self, max_entries: int | None = None) -> None:
        """Initialize the store.

        Args:
            max_entries: Capacity bound; 0 or None means unbounded.
                        Defaults to settings.cache_max_entries.
        """
        self._max_entries = settings.cache_max_entries if max_entries is None else max_entries
        self._entries: OrderedDict[str, CacheEntryEntity] = OrderedDict()
        self._lock = threading.Lock()

    @classmethod
    def create(cls, max_entries: int | None = None) -> "InMemoryCacheRepository":
        """Factory method to create InMemoryCacheRepository with defaults."""
        return cls(max_entries=max_entries)

    def load(self, key: str) -> CacheEntryEntity | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None:
                self._entries.move_to_end(key)
            return entry

    def save(self, entry: CacheEntryEntity) -> None:
        with self._lock:
            self._entries[entry.key] = entry
            self._entries.move_to_end(entry.key)
            if self._max_entries:
                while len(self._entries) > self._max_entries:
                    self._entries.popitem(last=False)

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear_all(self) -> int:
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
            return count

    def count_all(self) -> int:
        with self._lock:
            return len(self._entries)

    def health_check(self) -> bool:
        return True

    @property
    def max_entries(self) -> int:
        """Capacity bound (0 = unbounded)."""
        return self._max_entries
