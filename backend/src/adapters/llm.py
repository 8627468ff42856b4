import re
import threading
from typing import Any, Optional

from openai import OpenAI, OpenAIError

from adapters.base import BaseLLM, GenerationError
from adapters.utils import join_text_parts, unique_sorted

DEFAULT_TEMPERATURE = 0.2
DEFAULT_MAX_TOKENS = 1000

# Model id fragments of audio, image, embedding and legacy completion models.
NON_CHAT_MARKERS = (
    "instruct",
    "whisper",
    "tts",
    "speech",
    "audio",
    "image",
    "search",
    "realtime",
    "transcribe",
    "transcription",
    "embedding",
    "moderation",
    "text-",
    "dall-e",
    "dalle",
    "sora",
    "davinci",
    "babbage",
    "curie",
    "ada",
)
CHAT_MODEL_RE = re.compile(r"^(gpt-(4|5|3\.5|oss)|chatgpt-|o[1-9])")


def is_chat_model(model_id: str) -> bool:
    """Whether an OpenAI model id belongs to a text chat family."""
    model_id = model_id.lower().strip()
    model_id = model_id.removeprefix("ft:")
    if any(marker in model_id for marker in NON_CHAT_MARKERS):
        return False
    return bool(CHAT_MODEL_RE.match(model_id))


class OpenAILLM(BaseLLM):
    """OpenAI chat completions provider."""

    label = "OpenAI"

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4.1-mini",
        temperature: float = DEFAULT_TEMPERATURE,
        max_tokens: Optional[int] = DEFAULT_MAX_TOKENS,
        base_url: Optional[str] = None,
        **kwargs: Any,
    ):
        super().__init__(model, api_key, **kwargs)
        self.client = OpenAI(api_key=self.api_key, base_url=base_url)
        self.temperature = temperature
        self.max_tokens = max_tokens

    def _get_completion_params(
        self, messages: list[dict[str, str]], **kwargs: Any
    ) -> dict[str, Any]:
        """Build parameters for chat completion."""
        return {
            "model": self.model,
            "messages": messages,
            "temperature": kwargs.get("temperature", self.temperature),
            "max_tokens": kwargs.get("max_tokens", self.max_tokens),
        }

    def chat(
        self,
        messages: list[dict[str, str]],
        cancel_event: Optional[threading.Event] = None,
        **kwargs: Any,
    ) -> str:
        self._check_cancelled(cancel_event)
        params = self._get_completion_params(messages, **kwargs)
        try:
            response = self.client.chat.completions.create(**params)
        except OpenAIError as e:
            raise GenerationError(f"{self.label} request failed: {e}") from e
        self._check_cancelled(cancel_event)

        content = response.choices[0].message.content if response.choices else None
        if isinstance(content, list):
            content = join_text_parts(content)
        if isinstance(content, str) and content.strip():
            return content
        raise GenerationError("OpenAI response did not include text content.")

    def list_models(self) -> list[str]:
        try:
            models = self.client.models.list()
        except OpenAIError as e:
            raise GenerationError(f"{self.label} request failed: {e}") from e
        return unique_sorted(m.id for m in models if is_chat_model(m.id))
