import sys
import threading
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from openai import OpenAIError

sys.path.insert(0, str(Path(__file__).parent.parent.parent / "backend" / "src"))

from adapters import (
    AnthropicLLM,
    GeminiLLM,
    GenerationCancelled,
    GenerationError,
    OpenAILLM,
    create_llm,
    fetch_model_catalog,
    list_llm_providers,
    provider_label,
)

MESSAGES = [
    {"role": "system", "content": "You are helpful."},
    {"role": "user", "content": "Hello"},
    {"role": "assistant", "content": "Hi there"},
    {"role": "user", "content": "What is BM25?"},
]


def _http_response(json_data, ok: bool = True, status_code: int = 200) -> MagicMock:
    mock_response = MagicMock()
    mock_response.ok = ok
    mock_response.status_code = status_code
    mock_response.json.return_value = json_data
    return mock_response


class TestOpenAILLM:
    def _llm_with_reply(self, content) -> tuple[OpenAILLM, MagicMock]:
        mock_client = MagicMock()
        mock_response = MagicMock()
        mock_response.choices = [MagicMock(message=MagicMock(content=content))]
        mock_client.chat.completions.create.return_value = mock_response

        llm = OpenAILLM(api_key="test-key", model="gpt-4.1-mini")
        llm.client = mock_client
        return llm, mock_client

    def test_chat_returns_response(self) -> None:
        llm, mock_client = self._llm_with_reply("Chat response")

        result = llm.chat(MESSAGES)

        assert result == "Chat response"
        mock_client.chat.completions.create.assert_called_once_with(
            model="gpt-4.1-mini",
            messages=MESSAGES,
            temperature=0.2,
            max_tokens=1000,
        )

    def test_generate_wraps_prompt(self) -> None:
        llm, mock_client = self._llm_with_reply("Generated response")

        assert llm.generate("test prompt") == "Generated response"
        call_args = mock_client.chat.completions.create.call_args
        assert call_args[1]["messages"] == [{"role": "user", "content": "test prompt"}]

    def test_empty_reply_raises(self) -> None:
        llm, _ = self._llm_with_reply("   ")

        with pytest.raises(GenerationError, match="did not include text content"):
            llm.chat(MESSAGES)

    def test_api_error_wrapped(self) -> None:
        llm, mock_client = self._llm_with_reply("unused")
        mock_client.chat.completions.create.side_effect = OpenAIError("quota exceeded")

        with pytest.raises(GenerationError, match="OpenAI request failed: quota exceeded"):
            llm.chat(MESSAGES)

    def test_cancelled_before_request(self) -> None:
        llm, mock_client = self._llm_with_reply("unused")
        cancel = threading.Event()
        cancel.set()

        with pytest.raises(GenerationCancelled):
            llm.chat(MESSAGES, cancel_event=cancel)
        mock_client.chat.completions.create.assert_not_called()

    def test_requires_api_key(self) -> None:
        with pytest.raises(ValueError, match="API key is required"):
            OpenAILLM(api_key="  ")

    def test_list_models_keeps_chat_families(self) -> None:
        llm, mock_client = self._llm_with_reply("unused")
        mock_client.models.list.return_value = [
            MagicMock(id=model_id)
            for model_id in [
                "gpt-4o",
                "whisper-1",
                "text-embedding-3-small",
                "o3-mini",
                "ft:gpt-4o-mini:acme",
                "GPT-4o",
                "dall-e-3",
                "gpt-4.1-mini",
            ]
        ]

        assert llm.list_models() == ["ft:gpt-4o-mini:acme", "gpt-4.1-mini", "gpt-4o", "o3-mini"]

    def test_list_models_error_wrapped(self) -> None:
        llm, mock_client = self._llm_with_reply("unused")
        mock_client.models.list.side_effect = OpenAIError("invalid key")

        with pytest.raises(GenerationError, match="OpenAI request failed: invalid key"):
            llm.list_models()


class TestAnthropicLLM:
    def test_chat_separates_system_prompt(self) -> None:
        with patch("requests.Session.post") as mock_post:
            mock_post.return_value = _http_response(
                {"content": [{"type": "text", "text": "Ranked retrieval."}]}
            )

            llm = AnthropicLLM(api_key="test-key")
            result = llm.chat(MESSAGES)

            assert result == "Ranked retrieval."
            call_args = mock_post.call_args
            assert call_args[0][0] == "https://api.anthropic.com/v1/messages"
            body = call_args[1]["json"]
            assert body["system"] == "You are helpful."
            assert body["model"] == "claude-3-5-sonnet-latest"
            assert [m["role"] for m in body["messages"]] == ["user", "assistant", "user"]
            assert body["messages"][0]["content"] == [{"type": "text", "text": "Hello"}]
            assert call_args[1]["headers"]["x-api-key"] == "test-key"

    def test_error_body_surfaces_message(self) -> None:
        with patch("requests.Session.post") as mock_post:
            mock_post.return_value = _http_response(
                {"error": {"type": "auth", "message": "invalid x-api-key"}},
                ok=False,
                status_code=401,
            )

            llm = AnthropicLLM(api_key="bad-key")
            with pytest.raises(
                GenerationError, match=r"Claude \(Anthropic\) request failed: invalid x-api-key"
            ):
                llm.chat(MESSAGES)

    def test_error_without_body_uses_status(self) -> None:
        with patch("requests.Session.post") as mock_post:
            mock_response = _http_response(None, ok=False, status_code=503)
            mock_response.json.side_effect = ValueError("no json")
            mock_post.return_value = mock_response

            llm = AnthropicLLM(api_key="test-key")
            with pytest.raises(GenerationError, match="HTTP 503"):
                llm.chat(MESSAGES)

    def test_no_text_raises(self) -> None:
        with patch("requests.Session.post") as mock_post:
            mock_post.return_value = _http_response({"content": [{"type": "tool_use"}]})

            llm = AnthropicLLM(api_key="test-key")
            with pytest.raises(GenerationError, match="Claude response"):
                llm.chat(MESSAGES)

    def test_list_models(self) -> None:
        with patch("requests.Session.get") as mock_get:
            mock_get.return_value = _http_response(
                {
                    "data": [
                        {"id": "claude-3-haiku"},
                        {"id": "claude-3-5-sonnet-latest"},
                        {"type": "model"},
                    ]
                }
            )

            llm = AnthropicLLM(api_key="test-key")

            assert llm.list_models() == ["claude-3-5-sonnet-latest", "claude-3-haiku"]
            call_args = mock_get.call_args
            assert call_args[0][0] == "https://api.anthropic.com/v1/models"
            assert call_args[1]["headers"] == {"x-api-key": "test-key"}
            assert llm.session.headers["anthropic-version"] == "2023-06-01"
            assert llm.session.headers["Accept"] == "application/json"

    def test_list_models_error(self) -> None:
        with patch("requests.Session.get") as mock_get:
            mock_get.return_value = _http_response(
                {"error": {"message": "invalid x-api-key"}}, ok=False, status_code=401
            )

            llm = AnthropicLLM(api_key="bad-key")
            with pytest.raises(GenerationError, match="invalid x-api-key"):
                llm.list_models()


class TestGeminiLLM:
    def test_chat_builds_generate_content_request(self) -> None:
        with patch("requests.Session.post") as mock_post:
            mock_post.return_value = _http_response(
                {"candidates": [{"content": {"parts": [{"text": "Part one"}, {"text": "two"}]}}]}
            )

            llm = GeminiLLM(api_key="test-key", max_tokens=256)
            result = llm.chat(MESSAGES)

            assert result == "Part one\ntwo"
            call_args = mock_post.call_args
            assert call_args[0][0].endswith("/models/gemini-2.0-flash:generateContent")
            assert call_args[1]["params"] == {"key": "test-key"}
            body = call_args[1]["json"]
            assert body["systemInstruction"] == {"parts": [{"text": "You are helpful."}]}
            assert [c["role"] for c in body["contents"]] == ["user", "model", "user"]
            assert body["generationConfig"]["maxOutputTokens"] == 256

    def test_no_system_instruction_without_system_messages(self) -> None:
        with patch("requests.Session.post") as mock_post:
            mock_post.return_value = _http_response(
                {"candidates": [{"content": {"parts": [{"text": "ok"}]}}]}
            )

            llm = GeminiLLM(api_key="test-key")
            llm.chat([{"role": "user", "content": "hi"}])

            assert "systemInstruction" not in mock_post.call_args[1]["json"]

    def test_empty_candidates_raise(self) -> None:
        with patch("requests.Session.post") as mock_post:
            mock_post.return_value = _http_response({"candidates": []})

            llm = GeminiLLM(api_key="test-key")
            with pytest.raises(GenerationError, match="Gemini response"):
                llm.chat(MESSAGES)

    def test_cancelled_after_request(self) -> None:
        cancel = threading.Event()

        def _post(*args, **kwargs):
            cancel.set()
            return _http_response({"candidates": [{"content": {"parts": [{"text": "late"}]}}]})

        with patch("requests.Session.post", side_effect=_post):
            llm = GeminiLLM(api_key="test-key")
            with pytest.raises(GenerationCancelled):
                llm.chat(MESSAGES, cancel_event=cancel)

    def test_list_models_requires_generate_content(self) -> None:
        with patch("requests.Session.get") as mock_get:
            mock_get.return_value = _http_response(
                {
                    "models": [
                        {
                            "name": "models/gemini-2.0-flash",
                            "supportedGenerationMethods": ["generateContent", "countTokens"],
                        },
                        {
                            "name": "models/text-embedding-004",
                            "supportedGenerationMethods": ["embedContent"],
                        },
                        {
                            "name": "models/gemini-1.5-pro",
                            "supportedGenerationMethods": ["generateContent"],
                        },
                    ]
                }
            )

            llm = GeminiLLM(api_key="test-key")

            assert llm.list_models() == ["gemini-1.5-pro", "gemini-2.0-flash"]
            call_args = mock_get.call_args
            assert call_args[0][0].endswith("/v1beta/models")
            assert call_args[1]["params"] == {"key": "test-key"}


class TestRegistry:
    def test_providers_registered(self) -> None:
        assert set(list_llm_providers()) >= {"openai", "anthropic", "gemini"}

    def test_create_llm(self) -> None:
        llm = create_llm("gemini", api_key="test-key", model="gemini-1.5-pro")

        assert isinstance(llm, GeminiLLM)
        assert llm.model == "gemini-1.5-pro"

    def test_unknown_provider(self) -> None:
        with pytest.raises(ValueError, match="Unknown LLM provider: mistral"):
            create_llm("mistral", api_key="test-key")

    def test_provider_label(self) -> None:
        assert provider_label("anthropic") == "Claude (Anthropic)"
        assert provider_label("other") == "other"

    def test_model_catalog_blank_key_skips_request(self) -> None:
        with patch("requests.Session.get") as mock_get:
            assert fetch_model_catalog("anthropic", "   ") == []
            mock_get.assert_not_called()

    def test_model_catalog_uses_provider(self) -> None:
        with patch("requests.Session.get") as mock_get:
            mock_get.return_value = _http_response(
                {
                    "models": [
                        {
                            "name": "models/gemini-2.0-flash",
                            "supportedGenerationMethods": ["generateContent"],
                        }
                    ]
                }
            )

            assert fetch_model_catalog("gemini", "test-key") == ["gemini-2.0-flash"]
