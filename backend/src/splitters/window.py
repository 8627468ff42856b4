from .base import BaseTextSplitter

MIN_STEP = 100


def split_into_chunks(content: str, chunk_size: int, overlap: int) -> list[str]:
    """Split ``content`` into overlapping character windows.

    Windows are ``chunk_size`` characters long and advance by
    ``max(chunk_size - overlap, MIN_STEP)``. The last window always ends at
    ``len(content)``. Windows are stripped and empty ones dropped.

    Args:
        content: Raw document text.
        chunk_size: Window length in characters.
        overlap: Characters shared between consecutive windows.

    Returns:
        Chunk strings in document order. Content that fits in one window is
        returned whole and unstripped.
    """
    if len(content) <= chunk_size:
        return [content]

    step = max(chunk_size - overlap, MIN_STEP)
    chunks = []
    cursor = 0

    while cursor < len(content):
        end = min(cursor + chunk_size, len(content))
        window = content[cursor:end].strip()
        if window:
            chunks.append(window)
        if end == len(content):
            break
        cursor += step

    return chunks


class WindowTextSplitter(BaseTextSplitter):
    """Fixed-size sliding window splitter.

    Boundaries depend only on ``(content, chunk_size, chunk_overlap)``, which
    keeps chunk ids stable across rebuilds of the same payload.
    """

    def __init__(self, chunk_size: int = 800, chunk_overlap: int = 120):
        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap

    @property
    def step(self) -> int:
        return max(self.chunk_size - self.chunk_overlap, MIN_STEP)

    def split_text(self, text: str) -> list[str]:
        return split_into_chunks(text, self.chunk_size, self.chunk_overlap)
