"""Protocol interfaces for swappable implementations.

Protocols use structural typing, so tests can pass small fakes and the
server can swap the hosted model without touching the services.
"""

from .cache_store import CacheStore
from .remote_capability import RemoteCapability

__all__ = [
    "CacheStore",
    "RemoteCapability",
]
