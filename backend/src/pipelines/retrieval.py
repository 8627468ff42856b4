import logging
import threading
from pathlib import Path
from typing import Any, Optional, Sequence

from adapters import BaseLLM
from codec import create_default_payload, decode_payload, normalize_payload, payload_digest
from config import get_config_value, load_config
from models.chunk import RetrievedChunk
from models.payload import Payload
from stores import BaseChunkIndex, create_index
from .base import (
    DEFAULT_INDEX_PROVIDER,
    DEFAULT_MAX_CONTEXT_CHARS,
    DEFAULT_RECENT_HISTORY_LIMIT,
    create_llm_from_config,
)
from .context import format_retrieved_context, to_chat_messages

logger = logging.getLogger(__name__)


class RetrievalPipeline:
    """Pipeline answering questions against a shared payload.

    Holds one payload and the index built from it. Replacing the payload
    builds a new index and swaps it in; an existing index is never
    modified. Supports dependency injection for flexible composition.
    """

    def __init__(
        self,
        llm: Optional[BaseLLM],
        payload: Optional[Payload] = None,
        max_context_chars: int = DEFAULT_MAX_CONTEXT_CHARS,
        recent_history_limit: int = DEFAULT_RECENT_HISTORY_LIMIT,
        index_provider: str = DEFAULT_INDEX_PROVIDER,
        config: dict[str, Any] | None = None,
    ):
        self.llm = llm
        self.max_context_chars = max_context_chars
        self.recent_history_limit = recent_history_limit
        self.index_provider = index_provider
        self.config = config or {}

        self.payload: Payload
        self.digest = ""
        self.index: BaseChunkIndex
        self.set_payload(payload if payload is not None else create_default_payload())

    @classmethod
    def from_config(
        cls,
        config: dict[str, Any],
        payload: Optional[Payload] = None,
        llm: Optional[BaseLLM] = None,
    ) -> "RetrievalPipeline":
        """Create pipeline from configuration dictionary."""
        llm = llm or create_llm_from_config(config)

        max_context_chars = get_config_value(
            config, "retrieval.max_context_chars", DEFAULT_MAX_CONTEXT_CHARS
        )
        recent_history_limit = get_config_value(
            config, "retrieval.recent_history_limit", DEFAULT_RECENT_HISTORY_LIMIT
        )
        index_provider = get_config_value(
            config, "retrieval.index_provider", DEFAULT_INDEX_PROVIDER
        )

        return cls(
            llm=llm,
            payload=payload,
            max_context_chars=max_context_chars,
            recent_history_limit=recent_history_limit,
            index_provider=index_provider,
            config=config,
        )

    def set_payload(self, payload: Any) -> bool:
        """Normalize ``payload`` and rebuild the index if it changed.

        Returns:
            True if a new index was built.
        """
        normalized = normalize_payload(payload)
        digest = payload_digest(normalized)
        if digest == self.digest:
            return False

        index = create_index(self.index_provider, normalized)
        self.payload, self.index, self.digest = normalized, index, digest
        logger.info(f"Loaded payload {digest[:8]} with {index.count} chunks")
        return True

    def load_token(self, token: str) -> bool:
        """Replace the payload with the one encoded in ``token``."""
        return self.set_payload(decode_payload(token))

    def retrieve(self, query: str, top_k: Optional[int] = None) -> list[RetrievedChunk]:
        """Retrieve relevant chunks for a query."""
        logger.info(f"Searching for: {query[:50]}...")
        results = self.index.search(query, k=top_k)
        logger.info(f"Found {len(results)} results")
        return results

    def build_context(
        self, query: str, top_k: Optional[int] = None
    ) -> tuple[str, list[RetrievedChunk]]:
        chunks = self.retrieve(query, top_k)
        return format_retrieved_context(chunks, self.max_context_chars), chunks

    def build_messages(
        self, question: str, history: Sequence[dict[str, Any]] = (), context: str = ""
    ) -> list[dict[str, str]]:
        """Messages for ``question`` asked after ``history``."""
        turns = list(history) + [{"role": "user", "content": question}]
        return to_chat_messages(turns, self.payload, context, self.recent_history_limit)

    def generate(
        self,
        question: str,
        context: str,
        history: Sequence[dict[str, Any]] = (),
        cancel_event: Optional[threading.Event] = None,
    ) -> str:
        """Generate a response using the assembled context."""
        if self.llm is None:
            raise ValueError("No generation backend configured.")
        messages = self.build_messages(question, history, context)
        logger.info("Generating response...")
        return self.llm.chat(messages, cancel_event=cancel_event)

    def query(
        self,
        question: str,
        history: Sequence[dict[str, Any]] = (),
        cancel_event: Optional[threading.Event] = None,
    ) -> dict[str, Any]:
        """Execute a full RAG query: retrieve and generate."""
        context, chunks = self.build_context(question)
        response = self.generate(question, context, history, cancel_event)

        return {"response": response, "context": context, "chunks": chunks}


def get_retrieval_pipeline(
    config_path: Path = Path("config.toml"),
    token: Optional[str] = None,
    provider: Optional[str] = None,
) -> RetrievalPipeline:
    """Create a retrieval pipeline from config.

    Args:
        config_path: Path to configuration file.
        token: Optional shared token; the sample payload is used without one.
        provider: Overrides the configured generation provider.

    Returns:
        RetrievalPipeline instance.
    """
    config = load_config(config_path)
    payload = decode_payload(token) if token else None
    llm = create_llm_from_config(config, provider)
    return RetrievalPipeline.from_config(config, payload=payload, llm=llm)
