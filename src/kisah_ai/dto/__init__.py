"""Data Transfer Objects for API contracts.

These Pydantic models define the external API contract.
Internal domain logic should use entities from the entities package.
"""

from .requests import AskRequestDTO
from .responses import (
    AskResponse,
    CacheStatsResponse,
    HealthCheckResponse,
    MessageItem,
    SessionHistoryResponse,
)

__all__ = [
    "AskRequestDTO",
    "AskResponse",
    "CacheStatsResponse",
    "HealthCheckResponse",
    "MessageItem",
    "SessionHistoryResponse",
]
