"""Response DTOs for API endpoints."""

from typing import Any

from pydantic import BaseModel, Field


class AskResponse(BaseModel):
    """Response DTO for POST /api/ai."""

    text: str = Field(..., description="The answer text")
    local: bool | None = Field(None, description="True when answered by the local rule engine")
    cached: bool | None = Field(None, description="True when served from the response cache")
    raw: dict[str, Any] | None = Field(None, description="Payload returned by the hosted model")


class MessageItem(BaseModel):
    """Single message in a session history."""

    role: str = Field(..., description="'user' or 'assistant'")
    text: str = Field(..., description="Message body")
    ts: int = Field(..., description="Unix timestamp in milliseconds")


class SessionHistoryResponse(BaseModel):
    """Response DTO for GET /api/ai/sessions/{session_id}."""

    session_id: str = Field(..., description="Session identifier")
    history: list[MessageItem] = Field(
        default_factory=list,
        description="Messages, oldest first",
    )


class CacheStatsResponse(BaseModel):
    """Response DTO for cache statistics."""

    total_entries: int = Field(..., description="Entries held in process", ge=0)
    persisted: bool = Field(..., description="Whether a persisted mirror is configured")
    ttl_ms: int = Field(..., description="TTL for remote answers in milliseconds", ge=0)
    fallback_ttl_ms: int = Field(..., description="TTL for local answers in milliseconds", ge=0)
    sessions: int = Field(..., description="Number of known sessions", ge=0)


class HealthCheckResponse(BaseModel):
    """Response DTO for health check."""

    ok: bool = Field(..., description="Service is up")
    openai: bool = Field(..., description="Whether a hosted model is configured")
    cache_healthy: bool = Field(True, description="Whether the persisted cache mirror is reachable")
