"""Dependency injection configuration for the FastAPI app.

Uses FastAPI's app.state pattern for storing service instances.

Pattern:
    - Services stored in app.state during lifespan
    - Dependency functions retrieve from request.app.state
    - Clean separation, no global mutable state
"""

import logging
from contextlib import asynccontextmanager
from typing import Annotated

from fastapi import Depends, FastAPI, Request

from kisah_ai.config import Settings
from kisah_ai.handlers import AIHandler
from kisah_ai.protocols import RemoteCapability
from kisah_ai.repositories import InMemoryCacheRepository, OpenAIChatClient, RedisCacheRepository
from kisah_ai.services import (
    OFFLINE_MESSAGE,
    RequestResolver,
    ResponseCache,
    RuleEngine,
    SessionMemory,
    StreamDeliveryAdapter,
)

logger = logging.getLogger(__name__)


def get_resolver(request: Request) -> RequestResolver:
    """Dependency injection for RequestResolver from app.state.

    Raises:
        RuntimeError: If the resolver is not initialized
    """
    resolver = getattr(request.app.state, "resolver", None)
    if resolver is None:
        raise RuntimeError("RequestResolver not initialized. Check lifespan setup.")
    return resolver


def get_handler(request: Request) -> AIHandler:
    """Dependency injection for AIHandler from app.state.

    Raises:
        RuntimeError: If the handler is not initialized
    """
    handler = getattr(request.app.state, "ai_handler", None)
    if handler is None:
        raise RuntimeError("AIHandler not initialized. Check lifespan setup.")
    return handler


def build_remote(app_settings: Settings) -> RemoteCapability | None:
    """Hosted model client, or None when no key is configured."""
    if not app_settings.remote_configured:
        return None
    return OpenAIChatClient(
        api_key=app_settings.openai_api_key or "",
        model=app_settings.openai_model,
        base_url=app_settings.openai_base_url,
        timeout=app_settings.remote_timeout_seconds,
    )


def build_cache(app_settings: Settings) -> ResponseCache:
    mirror = RedisCacheRepository.create() if app_settings.cache_backend == "redis" else None
    return ResponseCache(
        store=InMemoryCacheRepository(max_entries=app_settings.cache_max_entries),
        mirror=mirror,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for FastAPI app.

    Initializes all layers and stores them in app.state:
    1. Remote capability (OpenAI, or an override supplied to create_app)
    2. Cache, sessions, rule engine and resolver (strict mode: remote
       errors reach the handler)
    3. Stream adapter (falls back to local rules, never retries the remote)
    4. Handler (HTTP endpoints) - stored in app.state.ai_handler
    """
    app_settings: Settings = app.state.settings

    remote = getattr(app.state, "remote_override", None)
    owns_remote = remote is None
    if remote is None:
        remote = build_remote(app_settings)

    resolver = RequestResolver(
        cache=build_cache(app_settings),
        sessions=SessionMemory(history_limit=app_settings.session_history_limit),
        rule_engine=RuleEngine(default_message=OFFLINE_MESSAGE),
        remote=remote,
        fallback_on_error=False,
        fallback_ttl_ms=app_settings.fallback_ttl_ms,
        default_ttl_ms=app_settings.cache_ttl_ms,
    )
    streamer = StreamDeliveryAdapter(
        resolver,
        chunk_size=app_settings.sse_chunk_size,
        delay_ms=app_settings.sse_chunk_delay_ms,
        remote_on_fallback=False,
    )

    app.state.remote = remote
    app.state.resolver = resolver
    app.state.ai_handler = AIHandler(resolver=resolver, streamer=streamer)

    logger.info("AI proxy initialized (openai=%s)", remote is not None)
    logger.info("Cache backend: %s", app_settings.cache_backend)

    yield

    if owns_remote and isinstance(remote, OpenAIChatClient):
        await remote.close()

    del app.state.ai_handler
    del app.state.resolver
    del app.state.remote
    logger.info("AI proxy shut down")


# Type aliases for cleaner dependency injection
HandlerDep = Annotated[AIHandler, Depends(get_handler)]
ResolverDep = Annotated[RequestResolver, Depends(get_resolver)]
