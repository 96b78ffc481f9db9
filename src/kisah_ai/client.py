"""Client-side facade for the AI assistant.

Bundles the pipeline the way the app sidebar uses it: ask the proxy
server first, answer from local rules when it is unreachable, cache
answers, keep per-session history, and stream (really or simulated).

Example:
    ```python
    from kisah_ai.client import KisahAI

    ai = KisahAI.create()  # proxy at settings.proxy_base_url
    text = await ai.ask("halo")
    full = await ai.stream_ask("motivasi dong", on_chunk=print)
    history = ai.get_session().history
    ```
"""

import asyncio
from typing import Any

from kisah_ai.config import settings
from kisah_ai.entities import MessageEntity, Role, SessionEntity
from kisah_ai.protocols import CacheStore, RemoteCapability
from kisah_ai.repositories import ProxyClient
from kisah_ai.services import (
    RequestResolver,
    ResponseCache,
    RuleEngine,
    SessionMemory,
    StreamDeliveryAdapter,
)
from kisah_ai.services.streaming import ChunkCallback


class KisahAI:
    """Ask / stream / helper API over a RequestResolver in fallback mode."""

    def __init__(
        self,
        resolver: RequestResolver,
        streamer: StreamDeliveryAdapter | None = None,
    ) -> None:
        self._resolver = resolver
        self._streamer = streamer or StreamDeliveryAdapter(resolver)

    @classmethod
    def create(
        cls,
        remote: RemoteCapability | None = None,
        offline: bool = False,
        mirror: CacheStore | None = None,
        base_url: str | None = None,
        api_key: str | None = None,
    ) -> "KisahAI":
        """Factory method wiring the default client pipeline.

        Args:
            remote: Remote capability to use. Defaults to a ProxyClient.
            offline: If True, no remote is used at all (rule engine only).
            mirror: Optional persisted store for the response cache.
            base_url: Proxy root URL for the default ProxyClient.
            api_key: Shared secret for the default ProxyClient.

        Returns:
            Configured KisahAI
        """
        if remote is None and not offline:
            remote = ProxyClient.create(base_url=base_url, api_key=api_key)

        resolver = RequestResolver(
            cache=ResponseCache.create(mirror=mirror),
            sessions=SessionMemory(),
            rule_engine=RuleEngine(),
            remote=remote,
            fallback_on_error=True,
        )
        streamer = StreamDeliveryAdapter(
            resolver,
            chunk_size=settings.stream_chunk_size,
            delay_ms=settings.stream_chunk_delay_ms,
        )
        return cls(resolver=resolver, streamer=streamer)

    async def ask(self, prompt: str, **opts: Any) -> str:
        """Resolve a prompt (cache, proxy, local rules) and return the answer."""
        return await self._resolver.ask(prompt, **opts)

    async def stream_ask(
        self,
        prompt: str,
        on_chunk: ChunkCallback,
        cancel: asyncio.Event | None = None,
        **opts: Any,
    ) -> str:
        """Deliver the answer fragment by fragment and return it assembled."""
        return await self._streamer.stream_ask(prompt, on_chunk, cancel=cancel, **opts)

    async def summarize_text(self, text: str, **opts: Any) -> str:
        return await self._resolver.summarize_text(text, **opts)

    async def analyze_code(self, code: str, **opts: Any) -> str:
        return await self._resolver.analyze_code(code, **opts)

    async def suggest_motivation(self, context: str, **opts: Any) -> str:
        return await self._resolver.suggest_motivation(context, **opts)

    def get_session(self, session_id: str | None = None) -> SessionEntity:
        return self._resolver.sessions.get(session_id)

    def push_session(self, session_id: str | None, role: Role, text: str) -> MessageEntity:
        return self._resolver.sessions.append(session_id, role, text)

    async def close(self) -> None:
        """Release the remote client's connections, if it holds any."""
        close = getattr(self._resolver.remote, "close", None)
        if close is not None:
            await close()

    @property
    def resolver(self) -> RequestResolver:
        return self._resolver

    @property
    def streamer(self) -> StreamDeliveryAdapter:
        return self._streamer
