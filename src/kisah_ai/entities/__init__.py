"""Domain entities for internal representation.

These are plain dataclasses used by services and repositories. They are
NOT used for API contracts - use DTOs from the dto package for that.
"""

from .ask import DEFAULT_SESSION_ID, AskRequest, Resolution, ResolutionSource
from .cache_entry import CacheEntryEntity
from .session import MessageEntity, Role, SessionEntity

__all__ = [
    "DEFAULT_SESSION_ID",
    "AskRequest",
    "Resolution",
    "ResolutionSource",
    "CacheEntryEntity",
    "MessageEntity",
    "Role",
    "SessionEntity",
]
