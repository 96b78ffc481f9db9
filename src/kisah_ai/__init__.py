"""Kisah Sukses AI - request pipeline for the journal's AI assistant.

This package provides a layered architecture:

Layers:
    - protocols: Interface contracts (CacheStore, RemoteCapability)
    - repositories: Stores and HTTP clients (in-memory, Redis, proxy, OpenAI)
    - services: Business logic (cache, sessions, rule engine, resolver, streaming)
    - handlers: HTTP endpoint handlers
    - dto: Data transfer objects (API contracts)
    - entities: Domain models (internal)

Usage:
    ```python
    from kisah_ai import KisahAI

    ai = KisahAI.create()
    text = await ai.ask("halo")
    ```

For the proxy server:
    ```python
    from kisah_ai.api.app import app
    ```
"""

from kisah_ai.client import KisahAI
from kisah_ai.config import get_redis_client, settings
from kisah_ai.entities import AskRequest, CacheEntryEntity, MessageEntity, Resolution, SessionEntity
from kisah_ai.errors import (
    KisahAIError,
    RemoteCapabilityError,
    RemoteMalformedError,
    RemoteRejectedError,
    RemoteUnavailableError,
)
from kisah_ai.protocols import CacheStore, RemoteCapability
from kisah_ai.repositories import (
    InMemoryCacheRepository,
    OpenAIChatClient,
    ProxyClient,
    RedisCacheRepository,
)
from kisah_ai.services import (
    RequestResolver,
    ResponseCache,
    RuleEngine,
    SessionMemory,
    StreamDeliveryAdapter,
)

__all__ = [
    # Configuration
    "settings",
    "get_redis_client",
    # Facade
    "KisahAI",
    # Protocols (interfaces)
    "CacheStore",
    "RemoteCapability",
    # Services (business logic)
    "RequestResolver",
    "ResponseCache",
    "RuleEngine",
    "SessionMemory",
    "StreamDeliveryAdapter",
    # Repositories (data access)
    "InMemoryCacheRepository",
    "RedisCacheRepository",
    "OpenAIChatClient",
    "ProxyClient",
    # Entities (domain models)
    "AskRequest",
    "Resolution",
    "CacheEntryEntity",
    "MessageEntity",
    "SessionEntity",
    # Errors
    "KisahAIError",
    "RemoteCapabilityError",
    "RemoteUnavailableError",
    "RemoteRejectedError",
    "RemoteMalformedError",
]
