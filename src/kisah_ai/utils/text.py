"""Text helpers for simulated streaming."""


def chunk_text(text: str, size: int) -> list[str]:
    """Split text into consecutive fragments of `size` characters.

    The last fragment may be shorter. Empty text yields no fragments, so
    the concatenation of the result is always equal to the input.
    """
    if size <= 0:
        raise ValueError("size must be positive")
    return [text[i : i + size] for i in range(0, len(text), size)]
