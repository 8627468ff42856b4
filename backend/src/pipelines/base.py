from typing import Any, Optional

from adapters import BaseLLM, create_llm
from config import get_llm_settings

DEFAULT_MAX_CONTEXT_CHARS = 12000
DEFAULT_RECENT_HISTORY_LIMIT = 12
DEFAULT_INDEX_PROVIDER = "bm25"

# Per-chunk cap inside the assembled context.
MAX_CHUNK_CHARS = 2200
TRUNCATION_MARKER = "\n...[truncated]"

GROUNDING_INSTRUCTION = (
    "Ground answers in the supplied context whenever possible. "
    "If context is insufficient, clearly say what is missing."
)


def create_llm_from_config(
    config: dict[str, Any], provider: Optional[str] = None
) -> BaseLLM:
    """Create an LLM instance from configuration."""
    settings = get_llm_settings(config, provider)
    return create_llm(settings.pop("provider"), **settings)
