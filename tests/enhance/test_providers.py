"""Tests for model providers with mocked SDK clients."""

from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest

from archgen.enhance.errors import APIError, APIKeyMissingError
from archgen.enhance.providers import (
    DASHSCOPE_BASE_URL,
    DEFAULT_MODELS,
    AliyunProvider,
    ClaudeProvider,
    OpenAIProvider,
    ProviderKind,
    create_provider,
)


class AuthenticationError(Exception):
    status_code = 401


class TestCreateProvider:
    @pytest.mark.parametrize(
        "kind,cls",
        [("claude", ClaudeProvider), ("gpt", OpenAIProvider), ("aliyun", AliyunProvider)],
    )
    def test_kinds(self, kind, cls):
        provider = create_provider(kind, api_key="test-key")

        assert isinstance(provider, cls)
        assert provider.model == DEFAULT_MODELS[ProviderKind(kind)]

    def test_custom_model_and_timeout(self):
        provider = create_provider(ProviderKind.GPT, api_key="k", model="gpt-4o", timeout=12)

        assert provider.model == "gpt-4o"
        assert provider.timeout == 12

    def test_unknown_kind(self):
        with pytest.raises(ValueError) as exc_info:
            create_provider("baidu", api_key="k")
        assert "baidu" in str(exc_info.value)

    def test_missing_key(self, monkeypatch):
        monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
        with pytest.raises(APIKeyMissingError):
            create_provider("claude")

    def test_provider_env_fallback(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "env-key")
        assert create_provider("gpt").api_key == "env-key"


class TestClaudeProvider:
    @pytest.fixture
    def mock_anthropic(self):
        with patch("anthropic.Anthropic") as mock:
            yield mock

    def _response(self, text):
        response = MagicMock()
        block = MagicMock()
        block.text = text
        response.content = [block]
        response.usage.input_tokens = 10
        response.usage.output_tokens = 5
        return response

    def test_complete(self, mock_anthropic):
        client = mock_anthropic.return_value
        client.messages.create.return_value = self._response('{"nodes": []}')

        completion = ClaudeProvider(api_key="k").complete("prompt", system="sys")

        assert completion.content == '{"nodes": []}'
        assert completion.usage["total_tokens"] == 15
        kwargs = client.messages.create.call_args.kwargs
        assert kwargs["system"] == "sys"
        assert kwargs["max_tokens"] == 4096
        assert kwargs["messages"] == [{"role": "user", "content": "prompt"}]

    def test_sdk_error_becomes_api_error(self, mock_anthropic):
        mock_anthropic.return_value.messages.create.side_effect = RuntimeError("boom")

        with pytest.raises(APIError) as exc_info:
            ClaudeProvider(api_key="k").complete("prompt")
        assert "boom" in str(exc_info.value)

    def test_authentication_error(self, mock_anthropic):
        mock_anthropic.return_value.messages.create.side_effect = AuthenticationError("bad")

        with pytest.raises(APIError) as exc_info:
            ClaudeProvider(api_key="k").complete("prompt")
        assert exc_info.value.status_code == 401
        assert "Invalid API key" in str(exc_info.value)

    def test_empty_reply(self, mock_anthropic):
        mock_anthropic.return_value.messages.create.return_value = self._response("")

        with pytest.raises(APIError):
            ClaudeProvider(api_key="k").complete("prompt")


class TestOpenAIProvider:
    @pytest.fixture
    def mock_openai(self):
        with patch("openai.OpenAI") as mock:
            yield mock

    def test_complete(self, mock_openai):
        response = MagicMock()
        response.choices = [SimpleNamespace(message=SimpleNamespace(content="hello"))]
        response.usage = SimpleNamespace(prompt_tokens=3, completion_tokens=2, total_tokens=5)
        client = mock_openai.return_value
        client.chat.completions.create.return_value = response

        completion = OpenAIProvider(api_key="k").complete("prompt", system="sys")

        assert completion.content == "hello"
        assert completion.usage == {"prompt_tokens": 3, "completion_tokens": 2, "total_tokens": 5}
        messages = client.chat.completions.create.call_args.kwargs["messages"]
        assert messages[0] == {"role": "system", "content": "sys"}

    def test_no_choices(self, mock_openai):
        mock_openai.return_value.chat.completions.create.return_value = MagicMock(choices=[])

        with pytest.raises(APIError):
            OpenAIProvider(api_key="k").complete("prompt")


class TestAliyunProvider:
    @pytest.fixture
    def mock_openai(self):
        with patch("openai.OpenAI") as mock:
            yield mock

    def _chunk(self, reasoning=None, content=None):
        delta = SimpleNamespace(reasoning_content=reasoning, content=content)
        return SimpleNamespace(choices=[SimpleNamespace(delta=delta)], usage=None)

    def test_streams_and_concatenates(self, mock_openai):
        usage = SimpleNamespace(prompt_tokens=4, completion_tokens=6, total_tokens=10)
        mock_openai.return_value.chat.completions.create.return_value = iter([
            self._chunk(reasoning="Let me "),
            self._chunk(reasoning="think."),
            self._chunk(content='{"nodes": '),
            self._chunk(content="[]}"),
            SimpleNamespace(choices=[], usage=usage),
        ])

        completion = AliyunProvider(api_key="k").complete("prompt")

        assert completion.content == '{"nodes": []}'
        assert completion.reasoning == "Let me think."
        assert completion.usage["total_tokens"] == 10
        assert mock_openai.call_args.kwargs["base_url"] == DASHSCOPE_BASE_URL
        assert mock_openai.return_value.chat.completions.create.call_args.kwargs["stream"] is True

    def test_stream_failure(self, mock_openai):
        def broken_stream():
            yield self._chunk(content="{")
            raise ConnectionError("reset")

        mock_openai.return_value.chat.completions.create.return_value = broken_stream()

        with pytest.raises(APIError):
            AliyunProvider(api_key="k").complete("prompt")

    def test_missing_key(self, monkeypatch):
        monkeypatch.delenv("DASHSCOPE_API_KEY", raising=False)
        with pytest.raises(APIKeyMissingError):
            AliyunProvider()
