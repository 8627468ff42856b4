"""Defensive normalization of raw payload structures.

Every field is defaulted, clamped or coerced independently. Only a
non-object input or an unsupported version aborts normalization.
"""

import logging
import math
from collections.abc import Mapping
from typing import Any, Optional

from models.payload import PAYLOAD_VERSION, Document, Payload, RetrievalConfig
from .errors import ValidationError

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "LinkRAG"
DEFAULT_SYSTEM_PROMPT = (
    "You are a helpful assistant. Prefer answers grounded in the provided "
    "context. If the context is insufficient, clearly say what is missing."
)

DEFAULT_TOP_K = 4
DEFAULT_CHUNK_SIZE = 800
DEFAULT_OVERLAP = 120

TOP_K_RANGE = (1, 12)
CHUNK_SIZE_RANGE = (200, 4000)

SAMPLE_DOC = (
    "LinkRAG packs a small set of reference documents into a single URL "
    "fragment for sharing.\n"
    "The corpus travels inside the shared link, and each reader answers "
    "questions against it with their own model credentials.\n"
    "One link reproduces the same grounded conversation without any server "
    "keeping state."
)


def _coerce_number(value: Any) -> Optional[float]:
    """Return ``value`` as a finite float, or None if it is not numeric."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def _clamp(value: int, low: int, high: int) -> int:
    return min(max(value, low), high)


def _clean_text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def _clean_doc(raw: Any, index: int) -> Document:
    entry = raw if isinstance(raw, Mapping) else {}
    return Document(
        id=_clean_text(entry.get("id")) or f"doc-{index + 1}",
        title=_clean_text(entry.get("title")) or f"Document {index + 1}",
        content=_clean_text(entry.get("content")),
    )


def normalize_retrieval(raw: Any) -> RetrievalConfig:
    """Clamp retrieval settings into their legal ranges.

    Non-numeric values fall back to the defaults. ``overlap`` is bounded by
    half of the already clamped ``chunk_size``.
    """
    entry = raw if isinstance(raw, Mapping) else {}

    top_k = _coerce_number(entry.get("topK"))
    chunk_size = _coerce_number(entry.get("chunkSize"))
    overlap = _coerce_number(entry.get("overlap"))

    top_k = _clamp(math.floor(top_k), *TOP_K_RANGE) if top_k is not None else DEFAULT_TOP_K
    chunk_size = (
        _clamp(math.floor(chunk_size), *CHUNK_SIZE_RANGE)
        if chunk_size is not None
        else DEFAULT_CHUNK_SIZE
    )
    overlap = (
        _clamp(math.floor(overlap), 0, chunk_size // 2)
        if overlap is not None
        else min(DEFAULT_OVERLAP, chunk_size // 2)
    )

    return RetrievalConfig(top_k=top_k, chunk_size=chunk_size, overlap=overlap)


def _check_version(raw: Mapping) -> None:
    value = raw.get("v")
    if value is None:
        return
    number = _coerce_number(value)
    if number is None or math.floor(number) != PAYLOAD_VERSION:
        logger.warning(f"Rejected payload with version {value!r}")
        raise ValidationError(f"Unsupported payload version: {value}")


def normalize_payload(raw: Any) -> Payload:
    """Return the canonical payload for ``raw``.

    Args:
        raw: A mapping shaped like the canonical JSON, or a ``Payload``.

    Returns:
        A new normalized ``Payload``.

    Raises:
        ValidationError: If ``raw`` is not a mapping or its ``v`` is not 1.
    """
    if isinstance(raw, Payload):
        raw = raw.to_canonical_dict()
    if not isinstance(raw, Mapping):
        raise ValidationError("Payload must be a JSON object.")

    _check_version(raw)

    docs_raw = raw.get("docs")
    if not isinstance(docs_raw, (list, tuple)):
        docs_raw = []
    docs = [_clean_doc(entry, index) for index, entry in enumerate(docs_raw)]
    kept = tuple(doc for doc in docs if doc.content)
    if len(kept) < len(docs):
        logger.debug(f"Dropped {len(docs) - len(kept)} documents without content")

    return Payload(
        title=_clean_text(raw.get("title")) or DEFAULT_TITLE,
        system_prompt=_clean_text(raw.get("systemPrompt")),
        docs=kept,
        retrieval=normalize_retrieval(raw.get("retrieval")),
    )


def create_default_payload() -> Payload:
    """Return the sample payload used when no link is supplied."""
    return Payload(
        title=DEFAULT_TITLE,
        system_prompt=DEFAULT_SYSTEM_PROMPT,
        docs=(Document(id="doc-1", title="About LinkRAG", content=SAMPLE_DOC),),
        retrieval=RetrievalConfig(
            top_k=DEFAULT_TOP_K, chunk_size=DEFAULT_CHUNK_SIZE, overlap=DEFAULT_OVERLAP
        ),
    )
