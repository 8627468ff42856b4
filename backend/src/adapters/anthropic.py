import threading
from typing import Any, Optional

from adapters.base import BaseLLM, GenerationError, split_system_messages
from adapters.llm import DEFAULT_MAX_TOKENS, DEFAULT_TEMPERATURE
from adapters.utils import create_session_with_pooling, read_json_response, unique_sorted

ANTHROPIC_VERSION = "2023-06-01"


class AnthropicLLM(BaseLLM):
    """Anthropic Messages API provider with connection pooling."""

    label = "Claude (Anthropic)"

    def __init__(
        self,
        api_key: str,
        model: str = "claude-3-5-sonnet-latest",
        temperature: float = DEFAULT_TEMPERATURE,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        base_url: str = "https://api.anthropic.com",
        timeout: float = 120,
        **kwargs: Any,
    ):
        super().__init__(model, api_key, **kwargs)
        self.base_url = base_url.rstrip("/")
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout = timeout
        self.session = create_session_with_pooling(
            headers={"anthropic-version": ANTHROPIC_VERSION}
        )

    def _build_payload(self, messages: list[dict[str, str]], **kwargs: Any) -> dict[str, Any]:
        """Build request payload for the Messages API."""
        system, turns = split_system_messages(messages)
        return {
            "model": self.model,
            "system": system,
            "messages": [
                {
                    "role": "assistant" if m["role"] == "assistant" else "user",
                    "content": [{"type": "text", "text": m["content"]}],
                }
                for m in turns
            ],
            "temperature": kwargs.get("temperature", self.temperature),
            "max_tokens": kwargs.get("max_tokens", self.max_tokens),
        }

    def _headers(self) -> dict[str, str]:
        return {"x-api-key": self.api_key}

    def chat(
        self,
        messages: list[dict[str, str]],
        cancel_event: Optional[threading.Event] = None,
        **kwargs: Any,
    ) -> str:
        self._check_cancelled(cancel_event)
        response = self.session.post(
            f"{self.base_url}/v1/messages",
            json=self._build_payload(messages, **kwargs),
            headers=self._headers(),
            timeout=self.timeout,
        )
        self._check_cancelled(cancel_event)
        data = read_json_response(response, self.label)

        content = data.get("content")
        parts = content if isinstance(content, list) else []
        text = "\n".join(
            part["text"]
            for part in parts
            if isinstance(part, dict)
            and part.get("type") == "text"
            and isinstance(part.get("text"), str)
            and part["text"]
        )
        if not text.strip():
            raise GenerationError("Claude response did not include text content.")
        return text

    def list_models(self) -> list[str]:
        response = self.session.get(
            f"{self.base_url}/v1/models",
            headers=self._headers(),
            timeout=self.timeout,
        )
        data = read_json_response(response, self.label)
        entries = data.get("data")
        return unique_sorted(
            entry.get("id") or entry.get("name")
            for entry in (entries if isinstance(entries, list) else [])
            if isinstance(entry, dict)
        )
