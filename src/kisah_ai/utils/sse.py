"""Server-sent events framing.

Only the `data:` field is used. A fragment containing line breaks is
sent as several `data:` lines and reassembled by the reader. SSE readers
treat `\r\n`, `\r` and `\n` alike, so every line break comes back as `\n`.
"""

import re
from collections.abc import AsyncIterator

DONE_SENTINEL = "[DONE]"

_LINE_BREAK_RE = re.compile(r"\r\n|\r|\n")


def encode_sse(data: str) -> str:
    """Frame a text fragment as one SSE event."""
    lines = _LINE_BREAK_RE.split(data)
    return "".join(f"data: {line}\n" for line in lines) + "\n"


def _field_value(line: str) -> str:
    value = line[len("data:"):]
    # A single space after the colon belongs to the framing
    if value.startswith(" "):
        value = value[1:]
    return value


async def iter_sse_data(lines: AsyncIterator[str]) -> AsyncIterator[str]:
    """Yield the data payload of each event read from an SSE line stream.

    Comment and non-data lines are ignored. Stops at the [DONE] sentinel.
    """
    buffer: list[str] = []
    async for raw_line in lines:
        line = raw_line.rstrip("\r")
        if line == "":
            if buffer:
                payload = "\n".join(buffer)
                buffer = []
                if payload == DONE_SENTINEL:
                    return
                yield payload
            continue
        if line.startswith("data:"):
            buffer.append(_field_value(line))

    if buffer:
        payload = "\n".join(buffer)
        if payload != DONE_SENTINEL:
            yield payload
