"""Ask request and resolution entities."""

from dataclasses import dataclass
from typing import Literal

ResolutionSource = Literal["cache", "remote", "local"]

DEFAULT_SESSION_ID = "default"


@dataclass(frozen=True)
class AskRequest:
    """A single logical "ask" operation.

    Attributes:
        prompt: The user prompt
        session_id: Conversation the answer is recorded in
        max_tokens: Requested answer length, part of the cache fingerprint
        temperature: Sampling temperature in [0, 1]
        force_refresh: Skip the cache lookup (the result still overwrites it)
        cache_prefix: Purpose prefix, part of the cache fingerprint
        ttl_ms: TTL for a remote-derived answer; None uses the configured default
    """

    prompt: str
    session_id: str = DEFAULT_SESSION_ID
    max_tokens: int = 400
    temperature: float = 0.6
    force_refresh: bool = False
    cache_prefix: str = ""
    ttl_ms: int | None = None

    def __post_init__(self) -> None:
        if not 0 <= self.temperature <= 1:
            raise ValueError("temperature must be between 0 and 1")
        if self.max_tokens <= 0:
            raise ValueError("max_tokens must be positive")


@dataclass(frozen=True)
class Resolution:
    """Outcome of resolving an AskRequest.

    Attributes:
        text: The answer delivered to the caller
        source: Which stage produced it
        raw: The remote payload, when the answer came from the remote capability
    """

    text: str
    source: ResolutionSource
    raw: dict | None = None

    @property
    def is_local(self) -> bool:
        return self.source == "local"
