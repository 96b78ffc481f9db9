"""Stream delivery adapter.

Delivers an answer as an ordered sequence of text fragments. The
genuine path relays the remote capability's incremental channel. When
that channel cannot be opened, the full resolver produces a complete
answer which is cut into fixed-size fragments and paced with a short
pause between them to look like live generation.
"""

import asyncio
import inspect
import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import aclosing

from kisah_ai.config import settings
from kisah_ai.entities import AskRequest
from kisah_ai.errors import RemoteCapabilityError
from kisah_ai.utils import chunk_text

from .resolver import RequestResolver

logger = logging.getLogger(__name__)

ChunkCallback = Callable[[str], Awaitable[None] | None]
Sleep = Callable[[float], Awaitable[None]]


async def paced_fragments(
    text: str,
    chunk_size: int,
    delay_seconds: float,
    sleep: Sleep = asyncio.sleep,
) -> AsyncIterator[str]:
    """Yield `text` in fixed-size fragments with a pause after each one."""
    for fragment in chunk_text(text, chunk_size):
        yield fragment
        await sleep(delay_seconds)


class StreamDeliveryAdapter:
    """Wraps a RequestResolver for incremental-output callers.

    Example:
        ```python
        adapter = StreamDeliveryAdapter(resolver)
        text = await adapter.stream_ask("halo", on_chunk=print)
        ```
    """

    def __init__(
        self,
        resolver: RequestResolver,
        chunk_size: int | None = None,
        delay_ms: int | None = None,
        remote_on_fallback: bool = True,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        """Initialize the adapter.

        Args:
            resolver: Resolver used for the remote channel and the fallback.
            chunk_size: Simulated fragment size. Defaults to settings.stream_chunk_size.
            delay_ms: Pause between simulated fragments. Defaults to settings.
            remote_on_fallback: If False, the simulated path answers from the
                               rule engine instead of retrying the remote.
            sleep: Awaitable pause, injectable for tests.
        """
        self._resolver = resolver
        self._chunk_size = chunk_size or settings.stream_chunk_size
        self._delay_ms = settings.stream_chunk_delay_ms if delay_ms is None else delay_ms
        self._remote_on_fallback = remote_on_fallback
        self._sleep = sleep

    async def stream(
        self,
        request: AskRequest,
        cancel: asyncio.Event | None = None,
    ) -> AsyncIterator[str]:
        """Yield the answer's fragments in order.

        Args:
            request: The ask request
            cancel: Once set, no further fragments are yielded

        Yields:
            Text fragments whose concatenation is the full answer
        """
        remote = self._resolver.remote
        if remote is not None and remote.supports_streaming:
            received: list[str] = []
            channel = remote.stream(
                request.prompt,
                request.max_tokens,
                request.temperature,
                request.session_id,
            )
            try:
                async with aclosing(channel):
                    async for fragment in channel:
                        if cancel is not None and cancel.is_set():
                            break
                        received.append(fragment)
                        yield fragment
            except RemoteCapabilityError as e:
                if not received:
                    logger.warning("Streaming not available, will simulate streaming: %s", e)
                else:
                    logger.warning(
                        "Stream interrupted after %d fragments, keeping partial answer: %s",
                        len(received),
                        e,
                    )
                    self._resolver.record_answer(request.session_id, "".join(received))
                    return
            else:
                self._resolver.record_answer(request.session_id, "".join(received))
                return

        resolution = await self._resolver.resolve(request, use_remote=self._remote_on_fallback)
        async for fragment in paced_fragments(
            resolution.text,
            self._chunk_size,
            self._delay_ms / 1000,
            sleep=self._sleep,
        ):
            if cancel is not None and cancel.is_set():
                break
            yield fragment

    async def stream_ask(
        self,
        prompt: str,
        on_chunk: ChunkCallback,
        cancel: asyncio.Event | None = None,
        **opts,
    ) -> str:
        """Stream an answer through a callback and return the assembled text.

        Args:
            prompt: The user prompt
            on_chunk: Called with each fragment in order; may be sync or async
            cancel: Optional cancellation signal
            **opts: Forwarded to RequestResolver.build_request

        Returns:
            The concatenation of every delivered fragment
        """
        request = self._resolver.build_request(prompt, **opts)
        delivered: list[str] = []
        async for fragment in self.stream(request, cancel=cancel):
            delivered.append(fragment)
            result = on_chunk(fragment)
            if inspect.isawaitable(result):
                await result
        return "".join(delivered)

    @property
    def chunk_size(self) -> int:
        return self._chunk_size

    @property
    def delay_ms(self) -> int:
        return self._delay_ms
