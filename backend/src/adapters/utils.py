"""Shared utilities for adapter implementations."""

from typing import Any, Optional

import requests

from adapters.base import GenerationError


def create_session_with_pooling(
    headers: Optional[dict[str, str]] = None,
    pool_connections: int = 10,
    pool_maxsize: int = 20,
    max_retries: int = 3,
) -> requests.Session:
    """Pooled JSON session shared by the HTTP providers.

    ``max_retries`` only covers connection failures; provider errors come
    back as responses and are reported by ``read_json_response``.
    """
    adapter = requests.adapters.HTTPAdapter(
        pool_connections=pool_connections,
        pool_maxsize=pool_maxsize,
        max_retries=max_retries,
    )
    session = requests.Session()
    for prefix in ("https://", "http://"):
        session.mount(prefix, adapter)
    session.headers.update({"Accept": "application/json", **(headers or {})})
    return session


def extract_error_message(data: Any) -> Optional[str]:
    """Find a human readable error in a provider's JSON error body."""
    if not isinstance(data, dict):
        return None
    error = data.get("error")
    if isinstance(error, str):
        return error
    if isinstance(data.get("message"), str):
        return data["message"]
    if isinstance(error, dict) and isinstance(error.get("message"), str):
        return error["message"]
    return None


def read_json_response(response: requests.Response, label: str) -> dict[str, Any]:
    """Return the JSON body, raising GenerationError for non-2xx responses."""
    try:
        data = response.json()
    except ValueError:
        data = None

    if not response.ok:
        detail = extract_error_message(data) or f"HTTP {response.status_code}"
        raise GenerationError(f"{label} request failed: {detail}")
    return data if isinstance(data, dict) else {}


def join_text_parts(parts: Any) -> str:
    """Join the ``text`` fields of a list of content parts."""
    if not isinstance(parts, list):
        return ""
    texts = [
        part["text"]
        for part in parts
        if isinstance(part, dict) and isinstance(part.get("text"), str) and part["text"]
    ]
    return "\n".join(texts)


def unique_sorted(values: Any) -> list[str]:
    """Trim, drop blanks and case-insensitive duplicates, then sort."""
    seen: set[str] = set()
    result = []
    for value in values:
        if not isinstance(value, str) or not value.strip():
            continue
        value = value.strip()
        if value.lower() in seen:
            continue
        seen.add(value.lower())
        result.append(value)
    return sorted(result, key=lambda v: (v.lower(), v))
