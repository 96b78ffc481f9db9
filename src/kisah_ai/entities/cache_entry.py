"""Cache entry domain entity."""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class CacheEntryEntity:
    """Domain entity for a cached answer.

    Attributes:
        key: The request fingerprint
        value: The cached answer text
        expires_at: Expiry as a Unix timestamp in milliseconds
    """

    key: str
    value: str
    expires_at: int

    def is_live(self, now_ms: int) -> bool:
        """An entry is readable only while now < expires_at."""
        return now_ms < self.expires_at

    def to_record(self) -> dict[str, Any]:
        """Serialized shape shared by every persisted backend."""
        return {"value": self.value, "expiresAt": self.expires_at}

    @classmethod
    def from_record(cls, key: str, record: dict[str, Any]) -> "CacheEntryEntity":
        return cls(key=key, value=str(record["value"]), expires_at=int(record["expiresAt"]))
