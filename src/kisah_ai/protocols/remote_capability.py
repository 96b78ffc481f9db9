"""Remote capability protocol.

Defines the interface for the hosted language model the pipeline tries
before falling back to local rules.

Implementations:
- ProxyClient: talks to our own proxy server (client side)
- OpenAIChatClient: talks to the chat completions API (server side)
"""

from collections.abc import AsyncIterator
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class RemoteCapability(Protocol):
    """Protocol for a hosted text-generation service.

    Implementations raise RemoteCapabilityError subclasses on failure;
    they never return partial or empty payloads silently.
    """

    @property
    def supports_streaming(self) -> bool:
        """Whether `stream` can deliver genuine incremental output."""
        ...

    async def complete(
        self,
        prompt: str,
        max_tokens: int,
        temperature: float,
        session_id: str,
    ) -> dict[str, Any]:
        """Request a full answer.

        Returns:
            The decoded JSON payload (shape varies by provider)

        Raises:
            RemoteUnavailableError: On network failure or timeout
            RemoteRejectedError: On a non-success status
            RemoteMalformedError: If the body is not JSON
        """
        ...

    def stream(
        self,
        prompt: str,
        max_tokens: int,
        temperature: float,
        session_id: str,
    ) -> AsyncIterator[str]:
        """Open an incremental channel and yield text fragments as they arrive.

        Raises:
            RemoteUnavailableError: On network failure or timeout
            RemoteRejectedError: On a non-success status
        """
        ...

    async def is_available(self) -> bool:
        """Check if the remote capability is reachable."""
        ...
