"""Cache storage protocol.

Defines the interface for a backing key-value store that mirrors the
in-process response cache so entries can survive a restart.

Implementations can include:
- In-process dictionary (default)
- Redis
- Any other key-value store that can hold a small JSON document
"""

from typing import Protocol, runtime_checkable

from kisah_ai.entities import CacheEntryEntity


@runtime_checkable
class CacheStore(Protocol):
    """Protocol for cache storage backends.

    Any type that implements these methods satisfies the protocol,
    no explicit inheritance needed.

    Example:
        ```python
        from kisah_ai.protocols import CacheStore

        store: CacheStore = InMemoryCacheRepository()
        store: CacheStore = RedisCacheRepository.create()
        ```
    """

    def load(self, key: str) -> CacheEntryEntity | None:
        """Load an entry regardless of expiry.

        Args:
            key: The cache fingerprint

        Returns:
            The stored entry, or None if absent
        """
        ...

    def save(self, entry: CacheEntryEntity) -> None:
        """Store an entry, overwriting any existing one for the same key.

        Args:
            entry: The entry to store
        """
        ...

    def delete(self, key: str) -> bool:
        """Delete a specific entry.

        Args:
            key: The cache fingerprint

        Returns:
            True if deleted, False otherwise
        """
        ...

    def clear_all(self) -> int:
        """Clear all entries.

        Returns:
            Number of entries deleted
        """
        ...

    def count_all(self) -> int:
        """Count entries currently held (expired ones included)."""
        ...

    def health_check(self) -> bool:
        """Check if the store is accessible."""
        ...
