"""Response cache service.

Fronts an in-process store with an optional persisted mirror. Reads try
the in-process store first and fall back to the mirror, repopulating the
in-process copy on a live hit. Expired entries are treated as absent and
purged on read. Mirror failures are logged and swallowed: the in-process
cache keeps working without durability.
"""

import hashlib
import json
import logging

import redis

from kisah_ai.config import settings
from kisah_ai.entities import CacheEntryEntity
from kisah_ai.protocols import CacheStore
from kisah_ai.repositories import InMemoryCacheRepository
from kisah_ai.utils import Clock, now_ms

logger = logging.getLogger(__name__)

# Errors a persisted mirror may raise; anything else is a bug and propagates
MIRROR_ERRORS: tuple[type[Exception], ...] = (redis.RedisError, OSError)


def fingerprint(cache_prefix: str, prompt: str, max_tokens: int) -> str:
    """Build the cache key for a request.

    The fields are JSON-encoded before hashing so that no choice of
    prefix or prompt text can produce the key of a different request.
    """
    encoded = json.dumps([cache_prefix, prompt, max_tokens], ensure_ascii=False)
    return "ai:" + hashlib.sha256(encoded.encode("utf-8")).hexdigest()


class ResponseCache:
    """Key -> answer store with per-entry expiry.

    Example:
        ```python
        cache = ResponseCache.create()
        cache.set("ai:...", "Halo!", ttl_ms=60_000)
        cache.get("ai:...")  # "Halo!" until the minute is over, then None
        ```
    """

    def __init__(
        self,
        store: CacheStore | None = None,
        mirror: CacheStore | None = None,
        clock: Clock | None = None,
    ) -> None:
        """Initialize the cache.

        Args:
            store: In-process store. Defaults to an InMemoryCacheRepository.
            mirror: Optional persisted store (e.g. Redis).
            clock: Millisecond clock, injectable for tests.
        """
        self._store = store or InMemoryCacheRepository.create()
        self._mirror = mirror
        self._clock = clock or now_ms

    @classmethod
    def create(
        cls,
        mirror: CacheStore | None = None,
        clock: Clock | None = None,
    ) -> "ResponseCache":
        """Factory method to create ResponseCache with a default in-process store."""
        return cls(store=InMemoryCacheRepository.create(), mirror=mirror, clock=clock)

    def get(self, key: str) -> str | None:
        """Return the cached value while it is live, otherwise None.

        An expired entry is removed as a side effect.
        """
        now = self._clock()

        entry = self._store.load(key)
        if entry is not None:
            if entry.is_live(now):
                return entry.value
            self._store.delete(key)

        if self._mirror is None:
            return None

        try:
            entry = self._mirror.load(key)
            if entry is None:
                return None
            if not entry.is_live(now):
                self._mirror.delete(key)
                return None
        except MIRROR_ERRORS as e:
            logger.warning("Persisted cache read failed for %s: %s", key, e)
            return None

        self._store.save(entry)
        return entry.value

    def set(self, key: str, value: str, ttl_ms: int) -> CacheEntryEntity:
        """Store a value, overwriting any existing entry for the key.

        Args:
            key: The request fingerprint
            value: The answer text
            ttl_ms: Time-to-live in milliseconds

        Returns:
            The stored entry
        """
        entry = CacheEntryEntity(key=key, value=value, expires_at=self._clock() + ttl_ms)
        self._store.save(entry)

        if self._mirror is not None:
            try:
                self._mirror.save(entry)
            except MIRROR_ERRORS as e:
                logger.warning("Persisted cache write failed for %s: %s", key, e)

        return entry

    def delete(self, key: str) -> bool:
        deleted = self._store.delete(key)
        if self._mirror is not None:
            try:
                deleted = self._mirror.delete(key) or deleted
            except MIRROR_ERRORS as e:
                logger.warning("Persisted cache delete failed for %s: %s", key, e)
        return deleted

    def clear(self) -> int:
        """Clear all entries.

        Returns:
            Number of in-process entries deleted
        """
        count = self._store.clear_all()
        if self._mirror is not None:
            try:
                self._mirror.clear_all()
            except MIRROR_ERRORS as e:
                logger.warning("Persisted cache clear failed: %s", e)
        return count

    def get_stats(self) -> dict:
        """Get cache statistics."""
        stats = {
            "total_entries": self._store.count_all(),
            "persisted": self._mirror is not None,
            "ttl_ms": settings.cache_ttl_ms,
            "fallback_ttl_ms": settings.fallback_ttl_ms,
        }
        if self._mirror is not None:
            stats["mirror_healthy"] = self._mirror.health_check()
        return stats

    @property
    def store(self) -> CacheStore:
        """Get the in-process store (for testing)."""
        return self._store

    @property
    def mirror(self) -> CacheStore | None:
        """Get the persisted mirror, if any."""
        return self._mirror
