"""Data models for LinkRAG."""

from .chunk import Chunk, RetrievedChunk
from .payload import PAYLOAD_VERSION, Document, Payload, RetrievalConfig

__all__ = [
    "Chunk",
    "RetrievedChunk",
    "Document",
    "Payload",
    "RetrievalConfig",
    "PAYLOAD_VERSION",
]
