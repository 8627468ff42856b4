from .base import (
    DEFAULT_INDEX_PROVIDER,
    DEFAULT_MAX_CONTEXT_CHARS,
    DEFAULT_RECENT_HISTORY_LIMIT,
    GROUNDING_INSTRUCTION,
    MAX_CHUNK_CHARS,
    create_llm_from_config,
)
from .context import format_retrieved_context, to_chat_messages, truncate_text
from .retrieval import RetrievalPipeline, get_retrieval_pipeline

__all__ = [
    "RetrievalPipeline",
    "get_retrieval_pipeline",
    "create_llm_from_config",
    "format_retrieved_context",
    "to_chat_messages",
    "truncate_text",
    "DEFAULT_INDEX_PROVIDER",
    "DEFAULT_MAX_CONTEXT_CHARS",
    "DEFAULT_RECENT_HISTORY_LIMIT",
    "GROUNDING_INSTRUCTION",
    "MAX_CHUNK_CHARS",
]
