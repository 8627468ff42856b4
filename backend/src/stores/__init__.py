from typing import Any

from models.payload import Payload
from .base import BaseChunkIndex
from .bm25 import B, COVERAGE_BONUS, K1, BM25Index, build_index, retrieve_top_chunks


def create_index(provider: str, payload: Payload, **kwargs: Any) -> BaseChunkIndex:
    """Create a chunk index instance based on provider.

    Args:
        provider: Provider name (currently only "bm25" supported)
        payload: Normalized payload to index
        **kwargs: Additional provider-specific parameters

    Returns:
        BaseChunkIndex instance
    """
    if provider == "bm25":
        return BM25Index.from_payload(payload, **kwargs)
    else:
        raise ValueError(f"Unknown index provider: {provider}")


__all__ = [
    "BaseChunkIndex",
    "BM25Index",
    "build_index",
    "create_index",
    "retrieve_top_chunks",
    "K1",
    "B",
    "COVERAGE_BONUS",
]
