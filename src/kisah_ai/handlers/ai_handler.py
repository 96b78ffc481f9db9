"""HTTP handlers for the AI proxy endpoints.

Handlers convert between DTOs (API contracts) and service calls.
They handle HTTP concerns like status codes, validation, and error handling.
"""

import logging
from collections.abc import AsyncIterator

from fastapi import HTTPException, status
from fastapi.responses import StreamingResponse

from kisah_ai.dto import (
    AskRequestDTO,
    AskResponse,
    CacheStatsResponse,
    MessageItem,
    SessionHistoryResponse,
)
from kisah_ai.entities import AskRequest
from kisah_ai.errors import RemoteCapabilityError, RemoteRejectedError
from kisah_ai.services import RequestResolver, StreamDeliveryAdapter
from kisah_ai.utils import DONE_SENTINEL, encode_sse

logger = logging.getLogger(__name__)

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


class AIHandler:
    """HTTP handlers for the AI proxy.

    This handler delegates business logic to RequestResolver and
    StreamDeliveryAdapter and handles:
    - Converting DTOs to AskRequest entities
    - Mapping remote failures to 502 / 500
    - Framing fragments as server-sent events
    """

    def __init__(self, resolver: RequestResolver, streamer: StreamDeliveryAdapter) -> None:
        self._resolver = resolver
        self._streamer = streamer

    def _to_request(self, dto: AskRequestDTO) -> AskRequest:
        if not dto.prompt:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="prompt required",
            )
        try:
            return self._resolver.build_request(
                dto.prompt,
                session_id=dto.session_id,
                max_tokens=dto.max_tokens,
                temperature=dto.temperature,
                force_refresh=dto.force_refresh,
            )
        except ValueError as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e

    async def ask(self, dto: AskRequestDTO) -> AskResponse:
        """Handle POST /api/ai requests.

        Raises:
            HTTPException: 400 without a prompt, 502 if the hosted model
                rejects the request, 500 on any other failure
        """
        request = self._to_request(dto)

        try:
            resolution = await self._resolver.resolve(request)
        except RemoteRejectedError as e:
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail={"error": "OpenAI error", "detail": e.detail},
            ) from e
        except RemoteCapabilityError as e:
            logger.error("Proxy to remote capability failed: %s", e)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail={"error": "Proxy failed", "detail": str(e)},
            ) from e
        except Exception as e:
            logger.exception("Unexpected failure while resolving prompt")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail={"error": "Proxy failed", "detail": str(e)},
            ) from e

        return AskResponse(
            text=resolution.text,
            local=True if resolution.is_local else None,
            cached=True if resolution.source == "cache" else None,
            raw=resolution.raw,
        )

    async def stream(self, dto: AskRequestDTO) -> StreamingResponse:
        """Handle POST /api/ai/stream requests.

        Each fragment becomes one `data:` event; the stream always ends
        with a `[DONE]` event.
        """
        request = self._to_request(dto)
        return StreamingResponse(
            self._sse_events(self._streamer.stream(request)),
            media_type="text/event-stream",
            headers=SSE_HEADERS,
        )

    async def _sse_events(self, fragments: AsyncIterator[str]) -> AsyncIterator[str]:
        try:
            async for fragment in fragments:
                yield encode_sse(fragment)
        except Exception:
            logger.exception("Streaming proxy failed")
        yield encode_sse(DONE_SENTINEL)

    async def get_session(self, session_id: str) -> SessionHistoryResponse:
        """Handle GET /api/ai/sessions/{session_id} requests."""
        session = self._resolver.sessions.get(session_id)
        return SessionHistoryResponse(
            session_id=session.id,
            history=[MessageItem(role=m.role, text=m.text, ts=m.ts) for m in session.history],
        )

    async def delete_session(self, session_id: str) -> dict:
        """Handle DELETE /api/ai/sessions/{session_id} requests."""
        if not self._resolver.sessions.delete(session_id):
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Session {session_id!r} not found",
            )
        return {"success": True, "session_id": session_id}

    async def get_cache_stats(self) -> CacheStatsResponse:
        """Handle GET /api/ai/cache/stats requests."""
        stats = self._resolver.cache.get_stats()
        return CacheStatsResponse(
            total_entries=stats.get("total_entries", 0),
            persisted=stats.get("persisted", False),
            ttl_ms=self._resolver.default_ttl_ms,
            fallback_ttl_ms=self._resolver.fallback_ttl_ms,
            sessions=self._resolver.sessions.count(),
        )

    async def clear_cache(self) -> dict:
        """Handle DELETE /api/ai/cache requests."""
        count = self._resolver.cache.clear()
        return {
            "success": True,
            "deleted_count": count,
            "message": "Cache cleared successfully",
        }

    @property
    def resolver(self) -> RequestResolver:
        return self._resolver
