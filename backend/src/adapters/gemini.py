import threading
from typing import Any, Optional
from urllib.parse import quote

from adapters.base import BaseLLM, GenerationError, split_system_messages
from adapters.llm import DEFAULT_MAX_TOKENS, DEFAULT_TEMPERATURE
from adapters.utils import (
    create_session_with_pooling,
    join_text_parts,
    read_json_response,
    unique_sorted,
)


class GeminiLLM(BaseLLM):
    """Google Gemini generateContent provider with connection pooling."""

    label = "Gemini (Google)"

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.0-flash",
        temperature: float = DEFAULT_TEMPERATURE,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        timeout: float = 120,
        **kwargs: Any,
    ):
        super().__init__(model, api_key, **kwargs)
        self.base_url = base_url.rstrip("/")
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout = timeout
        self.session = create_session_with_pooling()

    def _build_payload(self, messages: list[dict[str, str]], **kwargs: Any) -> dict[str, Any]:
        """Build request payload for generateContent."""
        system, turns = split_system_messages(messages)
        payload: dict[str, Any] = {
            "contents": [
                {
                    "role": "model" if m["role"] == "assistant" else "user",
                    "parts": [{"text": m["content"]}],
                }
                for m in turns
            ],
            "generationConfig": {
                "temperature": kwargs.get("temperature", self.temperature),
                "maxOutputTokens": kwargs.get("max_tokens", self.max_tokens),
            },
        }
        if system.strip():
            payload["systemInstruction"] = {"parts": [{"text": system}]}
        return payload

    def chat(
        self,
        messages: list[dict[str, str]],
        cancel_event: Optional[threading.Event] = None,
        **kwargs: Any,
    ) -> str:
        self._check_cancelled(cancel_event)
        response = self.session.post(
            f"{self.base_url}/models/{quote(self.model, safe='')}:generateContent",
            params={"key": self.api_key},
            json=self._build_payload(messages, **kwargs),
            timeout=self.timeout,
        )
        self._check_cancelled(cancel_event)
        data = read_json_response(response, self.label)

        candidates = data.get("candidates")
        first = candidates[0] if isinstance(candidates, list) and candidates else {}
        content = first.get("content") if isinstance(first, dict) else None
        text = join_text_parts(content.get("parts") if isinstance(content, dict) else None)
        if not text.strip():
            raise GenerationError("Gemini response did not include text content.")
        return text

    def list_models(self) -> list[str]:
        """Models supporting ``generateContent``, without the ``models/`` prefix."""
        response = self.session.get(
            f"{self.base_url}/models",
            params={"key": self.api_key},
            timeout=self.timeout,
        )
        data = read_json_response(response, self.label)
        entries = data.get("models")
        names = []
        for entry in entries if isinstance(entries, list) else []:
            if not isinstance(entry, dict) or not isinstance(entry.get("name"), str):
                continue
            if "generateContent" not in (entry.get("supportedGenerationMethods") or []):
                continue
            names.append(entry["name"].removeprefix("models/"))
        return unique_sorted(names)
