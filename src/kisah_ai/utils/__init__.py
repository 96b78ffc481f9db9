"""Utility modules for the AI request pipeline."""

from .clock import Clock, now_ms
from .sse import DONE_SENTINEL, encode_sse, iter_sse_data
from .text import chunk_text

__all__ = [
    "Clock",
    "now_ms",
    "DONE_SENTINEL",
    "encode_sse",
    "iter_sse_data",
    "chunk_text",
]
