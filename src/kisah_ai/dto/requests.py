"""Request DTOs for API endpoints."""

from pydantic import BaseModel, ConfigDict, Field


class AskRequestDTO(BaseModel):
    """Request body for POST /api/ai and POST /api/ai/stream.

    `prompt` is optional at the schema level so that a missing prompt is
    reported as 400 by the handler instead of a 422 validation error.
    """

    model_config = ConfigDict(populate_by_name=True)

    prompt: str | None = Field(None, description="The user prompt")
    max_tokens: int | None = Field(None, description="Requested answer length", gt=0)
    temperature: float | None = Field(
        None,
        description="Sampling temperature (0-1)",
        ge=0.0,
        le=1.0,
    )
    session_id: str | None = Field(
        None,
        alias="sessionId",
        description="Conversation to record the answer in (defaults to 'default')",
    )
    force_refresh: bool = Field(
        False,
        alias="force",
        description="Bypass the response cache",
    )
