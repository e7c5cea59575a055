"""Model provider adapters behind a common completion interface."""

import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Protocol

from .errors import APIError, APIKeyMissingError

if TYPE_CHECKING:
    from anthropic import Anthropic
    from openai import OpenAI

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 300.0
MAX_TOKENS = 4096
TEMPERATURE = 0.7
DASHSCOPE_BASE_URL = "https://dashscope.aliyuncs.com/compatible-mode/v1"


class ProviderKind(str, Enum):
    """Supported model providers."""

    CLAUDE = "claude"
    GPT = "gpt"
    ALIYUN = "aliyun"


DEFAULT_MODELS = {
    ProviderKind.CLAUDE: "claude-sonnet-4-20250514",
    ProviderKind.GPT: "gpt-4",
    ProviderKind.ALIYUN: "deepseek-r1",
}


@dataclass
class Completion:
    """A finished model reply."""

    content: str
    reasoning: str | None = None
    usage: dict[str, int] = field(default_factory=dict)


class CompletionProvider(Protocol):
    """Protocol for chat-style completion providers."""

    kind: ProviderKind
    model: str

    def complete(self, prompt: str, system: str | None = None) -> Completion:
        """Send one prompt and block until the full reply is available."""
        ...


def _wrap_error(e: Exception) -> APIError:
    """Translate an SDK exception into an APIError."""
    status_code = getattr(e, "status_code", None)
    if "AuthenticationError" in type(e).__name__:
        return APIError(f"Invalid API key: {e}", status_code=status_code)
    return APIError(f"Provider call failed: {e}", status_code=status_code)


class ClaudeProvider:
    """Anthropic Messages API provider."""

    kind = ProviderKind.CLAUDE

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        """Initialize the provider.

        Args:
            api_key: Anthropic API key. If not provided, uses ANTHROPIC_API_KEY env var.
            model: Claude model to use.
            timeout: Request timeout in seconds.

        Raises:
            APIKeyMissingError: If no API key is configured.
        """
        self.api_key = api_key or os.environ.get("ANTHROPIC_API_KEY")
        if not self.api_key:
            raise APIKeyMissingError(
                "No Anthropic API key configured. "
                "Set AI_API_KEY or ANTHROPIC_API_KEY, or pass --ai-api-key."
            )
        self.model = model or DEFAULT_MODELS[self.kind]
        self.timeout = timeout
        self._client: "Anthropic | None" = None

    @property
    def client(self) -> "Anthropic":
        """Lazy-load the Anthropic client."""
        if self._client is None:
            from anthropic import Anthropic

            self._client = Anthropic(api_key=self.api_key, timeout=self.timeout)
        return self._client

    def complete(self, prompt: str, system: str | None = None) -> Completion:
        """Send the prompt to Claude.

        Raises:
            APIError: If the API call fails or returns no text.
        """
        logger.debug("Sending %d char prompt to %s", len(prompt), self.model)
        kwargs: dict[str, Any] = {
            "model": self.model,
            "max_tokens": MAX_TOKENS,
            "temperature": TEMPERATURE,
            "messages": [{"role": "user", "content": prompt}],
        }
        if system:
            kwargs["system"] = system

        try:
            response = self.client.messages.create(**kwargs)
        except Exception as e:
            raise _wrap_error(e) from e

        content = ""
        for block in response.content:
            if hasattr(block, "text"):
                content += block.text
        if not content:
            raise APIError("No response from Claude model")

        usage = {}
        if getattr(response, "usage", None) is not None:
            input_tokens = response.usage.input_tokens or 0
            output_tokens = response.usage.output_tokens or 0
            usage = {
                "prompt_tokens": input_tokens,
                "completion_tokens": output_tokens,
                "total_tokens": input_tokens + output_tokens,
            }

        return Completion(content=content, usage=usage)


class OpenAIProvider:
    """OpenAI Chat Completions provider."""

    kind = ProviderKind.GPT

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        base_url: str | None = None,
    ):
        """Initialize the provider.

        Raises:
            APIKeyMissingError: If no API key is configured.
        """
        self.api_key = api_key or os.environ.get("OPENAI_API_KEY")
        if not self.api_key:
            raise APIKeyMissingError(
                "No OpenAI API key configured. "
                "Set AI_API_KEY or OPENAI_API_KEY, or pass --ai-api-key."
            )
        self.model = model or DEFAULT_MODELS[self.kind]
        self.timeout = timeout
        self.base_url = base_url
        self._client: "OpenAI | None" = None

    @property
    def client(self) -> "OpenAI":
        """Lazy-load the OpenAI client."""
        if self._client is None:
            from openai import OpenAI

            self._client = OpenAI(
                api_key=self.api_key, base_url=self.base_url, timeout=self.timeout
            )
        return self._client

    def _messages(self, prompt: str, system: str | None) -> list[dict[str, str]]:
        """Build the chat message list."""
        messages = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})
        return messages

    def complete(self, prompt: str, system: str | None = None) -> Completion:
        """Send the prompt to the chat completions endpoint.

        Raises:
            APIError: If the API call fails or returns no text.
        """
        logger.debug("Sending %d char prompt to %s", len(prompt), self.model)
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=self._messages(prompt, system),
                temperature=TEMPERATURE,
                max_tokens=MAX_TOKENS,
            )
        except Exception as e:
            raise _wrap_error(e) from e

        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise APIError(f"No response from {self.model}")

        usage = {}
        if getattr(response, "usage", None) is not None:
            usage = {
                "prompt_tokens": response.usage.prompt_tokens,
                "completion_tokens": response.usage.completion_tokens,
                "total_tokens": response.usage.total_tokens,
            }

        return Completion(content=content, usage=usage)


class AliyunProvider(OpenAIProvider):
    """DashScope provider using the OpenAI-compatible streaming endpoint.

    Reasoning and answer deltas are accumulated separately; only the answer
    is returned as the completion content.
    """

    kind = ProviderKind.ALIYUN

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        api_key = api_key or os.environ.get("DASHSCOPE_API_KEY")
        if not api_key:
            raise APIKeyMissingError(
                "No DashScope API key configured. "
                "Set AI_API_KEY or DASHSCOPE_API_KEY, or pass --ai-api-key."
            )
        super().__init__(
            api_key=api_key,
            model=model or DEFAULT_MODELS[ProviderKind.ALIYUN],
            timeout=timeout,
            base_url=DASHSCOPE_BASE_URL,
        )

    def complete(self, prompt: str, system: str | None = None) -> Completion:
        """Stream the reply and return it once complete.

        Raises:
            APIError: If the stream fails or yields no answer.
        """
        logger.debug("Streaming %d char prompt to %s", len(prompt), self.model)
        reasoning_parts: list[str] = []
        answer_parts: list[str] = []
        usage: dict[str, int] = {}

        try:
            stream = self.client.chat.completions.create(
                model=self.model,
                messages=self._messages(prompt, system),
                temperature=TEMPERATURE,
                max_tokens=MAX_TOKENS,
                stream=True,
            )
            for chunk in stream:
                if not chunk.choices:
                    # The final chunk carries only token usage
                    if getattr(chunk, "usage", None) is not None:
                        usage = {
                            "prompt_tokens": chunk.usage.prompt_tokens,
                            "completion_tokens": chunk.usage.completion_tokens,
                            "total_tokens": chunk.usage.total_tokens,
                        }
                    continue

                delta = chunk.choices[0].delta
                reasoning = getattr(delta, "reasoning_content", None)
                if reasoning:
                    reasoning_parts.append(reasoning)
                elif delta.content:
                    answer_parts.append(delta.content)
        except Exception as e:
            raise _wrap_error(e) from e

        content = "".join(answer_parts)
        if not content:
            raise APIError(f"No response from {self.model}")

        return Completion(
            content=content,
            reasoning="".join(reasoning_parts) or None,
            usage=usage,
        )


PROVIDERS = {
    ProviderKind.CLAUDE: ClaudeProvider,
    ProviderKind.GPT: OpenAIProvider,
    ProviderKind.ALIYUN: AliyunProvider,
}


def create_provider(
    kind: ProviderKind | str,
    api_key: str | None = None,
    model: str | None = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> CompletionProvider:
    """Create the provider adapter for a provider kind.

    Raises:
        ValueError: If the kind is not supported.
        APIKeyMissingError: If no API key is configured.
    """
    try:
        kind = ProviderKind(kind)
    except ValueError:
        supported = ", ".join(k.value for k in ProviderKind)
        raise ValueError(f"Unsupported AI type: {kind!r} (expected one of {supported})")

    return PROVIDERS[kind](api_key=api_key, model=model, timeout=timeout)
