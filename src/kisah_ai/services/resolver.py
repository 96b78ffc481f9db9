"""Request resolver: the core of the AI request pipeline.

One logical "ask" moves through these stages:

    CacheCheck -> RemoteAttempt -> (Success | RemoteFailure) -> LocalFallback -> Respond

- CacheCheck: a live entry for the request fingerprint is returned as is,
  unless force_refresh is set. Nothing is recorded on a hit.
- RemoteAttempt: one call to the remote capability, no retry.
- Success: extract the text, cache it with the request TTL, record the
  answer in session memory.
- RemoteFailure: logged. In fallback mode (client) it moves on to
  LocalFallback; in strict mode (proxy server) the error propagates so
  the HTTP boundary can report it.
- LocalFallback: rule engine answer, cached with the short fallback TTL,
  recorded in session memory.
"""

import json
import logging
from typing import Any

from kisah_ai.config import settings
from kisah_ai.entities import DEFAULT_SESSION_ID, AskRequest, Resolution
from kisah_ai.errors import RemoteCapabilityError
from kisah_ai.protocols import RemoteCapability

from .response_cache import ResponseCache, fingerprint
from .rule_engine import RuleEngine
from .session_memory import SessionMemory

logger = logging.getLogger(__name__)

SUMMARIZE_TEMPLATE = "Ringkas teks berikut menjadi 3-4 kalimat jelas dan langsung:\n\n{text}"
ANALYZE_TEMPLATE = (
    "Analisa potongan kode berikut. Sebutkan masalah potensial, bug, "
    "dan rekomendasi perbaikan secara singkat:\n\n{code}"
)
MOTIVATE_TEMPLATE = (
    "Buat pesan motivasi singkat (2-3 kalimat) yang relevan dengan konteks berikut:\n\n{context}"
)


def extract_text(payload: Any) -> str:
    """Pull the answer text out of a remote payload.

    Precedence: top-level `text`, then `choices[0].text`, then
    `choices[0].message.content`. Anything else is serialized whole so the
    caller never gets an empty answer.
    """
    if isinstance(payload, dict):
        text = payload.get("text")
        if isinstance(text, str) and text:
            return text

        choices = payload.get("choices")
        if isinstance(choices, list) and choices and isinstance(choices[0], dict):
            first = choices[0]
            text = first.get("text")
            if isinstance(text, str) and text:
                return text

            message = first.get("message")
            if isinstance(message, dict):
                content = message.get("content")
                if isinstance(content, str) and content:
                    return content

    return json.dumps(payload, ensure_ascii=False)


class RequestResolver:
    """Orchestrates cache, remote capability, rule engine and session memory.

    Cache and sessions are passed in rather than held globally, so each
    resolver (per test, per app instance) owns its own state.

    Example:
        ```python
        resolver = RequestResolver(
            cache=ResponseCache.create(),
            sessions=SessionMemory(),
            rule_engine=RuleEngine(),
            remote=ProxyClient.create(),
        )
        text = await resolver.ask("halo")
        ```
    """

    def __init__(
        self,
        cache: ResponseCache,
        sessions: SessionMemory,
        rule_engine: RuleEngine,
        remote: RemoteCapability | None = None,
        fallback_on_error: bool = True,
        fallback_ttl_ms: int | None = None,
        default_ttl_ms: int | None = None,
    ) -> None:
        """Initialize the resolver.

        Args:
            cache: Response cache shared by all requests of this resolver.
            sessions: Session memory shared by all requests of this resolver.
            rule_engine: Local responder used when the remote is unavailable.
            remote: Hosted model; None means "not configured".
            fallback_on_error: If False, remote failures propagate instead of
                              falling back (used by the proxy server).
            fallback_ttl_ms: TTL for rule-engine answers. Defaults to settings.
            default_ttl_ms: TTL for remote answers when the request sets none.
        """
        self._cache = cache
        self._sessions = sessions
        self._rules = rule_engine
        self._remote = remote
        self._fallback_on_error = fallback_on_error
        self._fallback_ttl_ms = fallback_ttl_ms or settings.fallback_ttl_ms
        self._default_ttl_ms = default_ttl_ms or settings.cache_ttl_ms

    def build_request(
        self,
        prompt: str,
        session_id: str | None = None,
        max_tokens: int | None = None,
        temperature: float | None = None,
        force_refresh: bool = False,
        cache_prefix: str = "",
        ttl_ms: int | None = None,
    ) -> AskRequest:
        """Fill in configured defaults for an AskRequest."""
        return AskRequest(
            prompt=prompt,
            session_id=session_id or DEFAULT_SESSION_ID,
            max_tokens=max_tokens or settings.default_max_tokens,
            temperature=settings.default_temperature if temperature is None else temperature,
            force_refresh=force_refresh,
            cache_prefix=cache_prefix,
            ttl_ms=ttl_ms,
        )

    async def resolve(self, request: AskRequest, use_remote: bool = True) -> Resolution:
        """Run one request through the pipeline.

        Args:
            request: The ask request
            use_remote: If False, skip the remote attempt and answer locally

        Returns:
            Resolution with the answer and the stage that produced it

        Raises:
            RemoteCapabilityError: Only when fallback_on_error is False
        """
        key = fingerprint(request.cache_prefix, request.prompt, request.max_tokens)

        if not request.force_refresh:
            cached = self._cache.get(key)
            if cached is not None:
                logger.debug("Cache hit for %s", key)
                return Resolution(text=cached, source="cache")

        if use_remote and self._remote is not None:
            try:
                payload = await self._remote.complete(
                    request.prompt,
                    request.max_tokens,
                    request.temperature,
                    request.session_id,
                )
            except RemoteCapabilityError as e:
                if not self._fallback_on_error:
                    raise
                logger.warning("Remote capability failed, using local fallback: %s", e)
            else:
                text = extract_text(payload)
                self._cache.set(key, text, request.ttl_ms or self._default_ttl_ms)
                self.record_answer(request.session_id, text)
                raw = payload if isinstance(payload, dict) else None
                return Resolution(text=text, source="remote", raw=raw)

        text = self._rules.respond(request.prompt)
        self._cache.set(key, text, self._fallback_ttl_ms)
        self.record_answer(request.session_id, text)
        return Resolution(text=text, source="local")

    async def ask(
        self,
        prompt: str,
        session_id: str | None = None,
        max_tokens: int | None = None,
        temperature: float | None = None,
        force_refresh: bool = False,
        cache_prefix: str = "",
        ttl_ms: int | None = None,
    ) -> str:
        """Resolve a prompt and return only the answer text."""
        request = self.build_request(
            prompt,
            session_id=session_id,
            max_tokens=max_tokens,
            temperature=temperature,
            force_refresh=force_refresh,
            cache_prefix=cache_prefix,
            ttl_ms=ttl_ms,
        )
        resolution = await self.resolve(request)
        return resolution.text

    def record_answer(self, session_id: str, answer: str) -> None:
        """Append the assistant answer to the session. Prompts are not recorded."""
        self._sessions.append(session_id, "assistant", answer)

    async def summarize_text(self, text: str, **opts: Any) -> str:
        return await self.ask(SUMMARIZE_TEMPLATE.format(text=text), cache_prefix="summarize", **opts)

    async def analyze_code(self, code: str, **opts: Any) -> str:
        return await self.ask(ANALYZE_TEMPLATE.format(code=code), cache_prefix="analyze", **opts)

    async def suggest_motivation(self, context: str, **opts: Any) -> str:
        return await self.ask(MOTIVATE_TEMPLATE.format(context=context), cache_prefix="motivate", **opts)

    @property
    def cache(self) -> ResponseCache:
        return self._cache

    @property
    def sessions(self) -> SessionMemory:
        return self._sessions

    @property
    def rule_engine(self) -> RuleEngine:
        return self._rules

    @property
    def remote(self) -> RemoteCapability | None:
        return self._remote

    @property
    def fallback_ttl_ms(self) -> int:
        return self._fallback_ttl_ms

    @property
    def default_ttl_ms(self) -> int:
        return self._default_ttl_ms
