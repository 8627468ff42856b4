import threading
from abc import ABC, abstractmethod
from typing import Any, Optional


class GenerationError(RuntimeError):
    """A generation backend failed or returned no text."""


class GenerationCancelled(GenerationError):
    """The caller cancelled the request."""


class BaseLLM(ABC):
    """Abstract base class for chat generation providers.

    Credentials are passed in explicitly; providers do not read them from
    the environment.
    """

    label = "LLM"

    def __init__(self, model: str, api_key: str, **kwargs: Any):
        if not api_key or not api_key.strip():
            raise ValueError("API key is required.")
        if not model or not model.strip():
            raise ValueError("Model is required.")
        self.model = model
        self.api_key = api_key.strip()
        self.kwargs = kwargs

    @abstractmethod
    def chat(
        self,
        messages: list[dict[str, str]],
        cancel_event: Optional[threading.Event] = None,
        **kwargs: Any,
    ) -> str:
        """Return the assistant reply for a system/user/assistant message list."""
        pass

    @abstractmethod
    def list_models(self) -> list[str]:
        """Return the sorted chat model ids available to this API key."""
        pass

    def generate(self, prompt: str, **kwargs: Any) -> str:
        return self.chat([{"role": "user", "content": prompt}], **kwargs)

    def _check_cancelled(self, cancel_event: Optional[threading.Event]) -> None:
        if cancel_event is not None and cancel_event.is_set():
            raise GenerationCancelled(f"{self.label} request was cancelled.")


def split_system_messages(
    messages: list[dict[str, str]],
) -> tuple[str, list[dict[str, str]]]:
    """Separate system messages (joined) from the conversation turns."""
    system = "\n\n".join(m["content"] for m in messages if m["role"] == "system")
    turns = [m for m in messages if m["role"] != "system"]
    return system, turns
