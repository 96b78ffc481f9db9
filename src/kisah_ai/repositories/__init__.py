"""Repository layer for data access.

This layer hides external dependencies (Redis, the proxy server, the
hosted model API) behind protocol-based interfaces, so services can be
unit tested with small fakes.
"""

from kisah_ai.protocols import CacheStore, RemoteCapability

from .memory_repository import InMemoryCacheRepository
from .openai_client import OpenAIChatClient
from .proxy_client import ProxyClient
from .redis_repository import RedisCacheRepository

__all__ = [
    "CacheStore",
    "RemoteCapability",
    "InMemoryCacheRepository",
    "RedisCacheRepository",
    "OpenAIChatClient",
    "ProxyClient",
]
