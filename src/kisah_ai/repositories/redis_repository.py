"""Redis implementation of CacheStore.

Mirrors response-cache entries into Redis so they survive a process
restart. Each entry is a JSON string `{"value": ..., "expiresAt": ...}`
stored under `<prefix><fingerprint>` with a native millisecond expiry,
so Redis drops it on its own once it is stale.
"""

import json

import redis

from kisah_ai.config import get_redis_client, settings
from kisah_ai.entities import CacheEntryEntity
from kisah_ai.utils import Clock, now_ms


class RedisCacheRepository:
    """Redis key-value store satisfying the CacheStore protocol.

    Errors from the client (redis.RedisError) are not handled here; the
    ResponseCache treats this store as best-effort and swallows them.
    """

    def __init__(
        self,
        redis_client: redis.Redis | None = None,
        key_prefix: str | None = None,
        clock: Clock | None = None,
    ) -> None:
        """Initialize the Redis cache repository.

        Args:
            redis_client: Redis client instance. If None, creates default.
            key_prefix: Prefix for every stored key. Defaults to settings.
            clock: Millisecond clock used to derive the native expiry.
        """
        self._client = redis_client or get_redis_client()
        self._prefix = key_prefix or settings.cache_key_prefix
        self._clock = clock or now_ms

    @classmethod
    def create(cls, key_prefix: str | None = None) -> "RedisCacheRepository":
        """Factory method to create RedisCacheRepository with defaults.

        Args:
            key_prefix: Redis key prefix. If None, uses settings.

        Returns:
            Configured RedisCacheRepository
        """
        return cls(key_prefix=key_prefix)

    def _key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    def load(self, key: str) -> CacheEntryEntity | None:
        """Load an entry by fingerprint.

        Unparseable documents are deleted and reported as absent.
        """
        raw = self._client.get(self._key(key))
        if raw is None:
            return None
        if isinstance(raw, bytes):
            raw = raw.decode()

        try:
            return CacheEntryEntity.from_record(key, json.loads(raw))
        except (json.JSONDecodeError, KeyError, TypeError, ValueError):
            self._client.delete(self._key(key))
            return None

    def save(self, entry: CacheEntryEntity) -> None:
        """Store an entry with a native expiry matching expires_at."""
        ttl_ms = entry.expires_at - self._clock()
        if ttl_ms <= 0:
            self._client.delete(self._key(entry.key))
            return

        self._client.set(self._key(entry.key), json.dumps(entry.to_record()), px=ttl_ms)

    def delete(self, key: str) -> bool:
        result: int = self._client.delete(self._key(key))  # type: ignore[assignment]
        return result > 0

    def clear_all(self) -> int:
        count = 0
        for key in self._client.scan_iter(match=f"{self._prefix}*"):
            if self._client.delete(key):
                count += 1
        return count

    def count_all(self) -> int:
        count = 0
        for _ in self._client.scan_iter(match=f"{self._prefix}*"):
            count += 1
        return count

    def health_check(self) -> bool:
        """Check if Redis is accessible.

        Returns:
            True if healthy, False otherwise
        """
        try:
            return bool(self._client.ping())
        except redis.RedisError:
            return False

    @property
    def client(self) -> redis.Redis:
        """Get the Redis client."""
        return self._client
