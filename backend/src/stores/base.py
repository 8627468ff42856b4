from abc import ABC, abstractmethod
from typing import Optional

from models.chunk import Chunk, RetrievedChunk


class BaseChunkIndex(ABC):
    """Abstract base class for read-only chunk indexes.

    An index is built once per payload and never updated in place; a
    payload change produces a new index that replaces the old one.
    """

    chunks: tuple[Chunk, ...]
    top_k: int

    @abstractmethod
    def search(self, query: str, k: Optional[int] = None) -> list[RetrievedChunk]:
        """Return at most ``k`` chunks ordered by descending relevance."""
        pass

    @property
    def count(self) -> int:
        """Return the number of chunks in the index."""
        return len(self.chunks)
