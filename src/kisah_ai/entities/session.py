"""Session and message domain entities."""

from dataclasses import dataclass, field
from typing import Literal

Role = Literal["user", "assistant"]


@dataclass(frozen=True)
class MessageEntity:
    """A single exchanged message.

    Attributes:
        role: Who produced the text ("user" or "assistant")
        text: The message body
        ts: Creation time as a Unix timestamp in milliseconds
    """

    role: Role
    text: str
    ts: int


@dataclass
class SessionEntity:
    """A conversation, holding its history oldest-first."""

    id: str
    history: list[MessageEntity] = field(default_factory=list)
