"""Assembly of retrieved chunks into grounding context and chat messages."""

import logging
from typing import Any, Sequence

from models.chunk import RetrievedChunk
from models.payload import Payload
from .base import (
    DEFAULT_MAX_CONTEXT_CHARS,
    DEFAULT_RECENT_HISTORY_LIMIT,
    GROUNDING_INSTRUCTION,
    MAX_CHUNK_CHARS,
    TRUNCATION_MARKER,
)

logger = logging.getLogger(__name__)

BLOCK_SEPARATOR = "\n\n"


def truncate_text(text: str, max_chars: int) -> str:
    """Cut ``text`` so that it plus the truncation marker fits in ``max_chars``."""
    if len(text) <= max_chars:
        return text
    keep = max(max_chars - len(TRUNCATION_MARKER) - 1, 32)
    return text[:keep].rstrip() + TRUNCATION_MARKER


def format_retrieved_context(
    chunks: Sequence[RetrievedChunk], max_chars: int = DEFAULT_MAX_CONTEXT_CHARS
) -> str:
    """Render ranked chunks as numbered blocks within a character budget.

    Blocks are added in rank order until the next one would push the total
    (separators included) past ``max_chars``; that block and every later one
    are dropped whole.

    Args:
        chunks: Retrieved chunks, best first.
        max_chars: Upper bound on the returned string's length.

    Returns:
        The context string, empty when nothing fits.
    """
    blocks: list[str] = []
    total = 0

    for position, chunk in enumerate(chunks, start=1):
        body = truncate_text(chunk.content, MAX_CHUNK_CHARS)
        block = f"[{position}] {chunk.doc_title}\n{body}"
        extra = len(block) + (len(BLOCK_SEPARATOR) if blocks else 0)
        if total + extra > max_chars:
            logger.warning(
                f"Context budget of {max_chars} chars reached, "
                f"dropped {len(chunks) - len(blocks)} of {len(chunks)} chunks"
            )
            break
        blocks.append(block)
        total += extra

    return BLOCK_SEPARATOR.join(blocks)


def to_chat_messages(
    history: Sequence[dict[str, Any]],
    payload: Payload,
    context: str,
    recent_history_limit: int = DEFAULT_RECENT_HISTORY_LIMIT,
) -> list[dict[str, str]]:
    """Build the message list sent to a generation adapter.

    A single system message carries the payload's system prompt and the
    grounding context; it is followed by the last ``recent_history_limit``
    user/assistant turns of ``history``.
    """
    messages: list[dict[str, str]] = []
    system_parts = []

    if payload.system_prompt.strip():
        system_parts.append(payload.system_prompt.strip())
    if context.strip():
        system_parts.append(f"{GROUNDING_INSTRUCTION}\n\nContext:\n{context}")
    if system_parts:
        messages.append({"role": "system", "content": "\n\n".join(system_parts)})

    turns = [m for m in history if m.get("role") in ("user", "assistant")]
    recent = turns[-recent_history_limit:] if recent_history_limit > 0 else []
    for message in recent:
        messages.append({"role": message["role"], "content": str(message.get("content", ""))})

    return messages
