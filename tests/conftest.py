import threading
from pathlib import Path
from typing import Any, Optional

import pytest

from adapters.base import BaseLLM
from codec import normalize_payload
from models.payload import Payload


class MockLLM(BaseLLM):
    """Mock LLM for testing."""

    label = "Mock"

    def __init__(self, model: str = "mock-llm", **kwargs: Any):
        super().__init__(model, api_key="test-key", **kwargs)
        self.calls: list[list[dict[str, str]]] = []

    def chat(
        self,
        messages: list[dict[str, str]],
        cancel_event: Optional[threading.Event] = None,
        **kwargs: Any,
    ) -> str:
        self._check_cancelled(cancel_event)
        self.calls.append(messages)
        return "Mock chat response"

    def list_models(self) -> list[str]:
        return [self.model]


@pytest.fixture
def mock_llm() -> MockLLM:
    return MockLLM()


@pytest.fixture
def raw_payload() -> dict[str, Any]:
    return {
        "v": 1,
        "title": "  Ops Handbook ",
        "systemPrompt": "Answer like an on-call engineer. ",
        "docs": [
            {
                "id": "ops",
                "title": "Release runbook",
                "content": "deploy rollback procedure " * 3,
            },
            {
                "id": "ui",
                "title": "Console tour",
                "content": "The rollback button lives in the settings page.",
            },
            {
                "id": "misc",
                "title": "Office notes",
                "content": "Lunch is served at noon in the kitchen.",
            },
        ],
        "retrieval": {"topK": 4, "chunkSize": 800, "overlap": 120},
    }


@pytest.fixture
def sample_payload(raw_payload: dict[str, Any]) -> Payload:
    return normalize_payload(raw_payload)


@pytest.fixture
def temp_config(tmp_path: Path) -> Path:
    config_content = """
[llm]
provider = "openai"
model = "gpt-4.1-mini"
temperature = 0.2

[llm.api_keys]
openai = "${LINKRAG_TEST_OPENAI_KEY:-sk-test}"

[retrieval]
max_context_chars = 500
recent_history_limit = 2

[share]
base_url = "https://example.org/chat/"
"""
    config_path = tmp_path / "config.toml"
    config_path.write_text(config_content)
    return config_path
