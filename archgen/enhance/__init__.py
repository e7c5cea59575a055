"""Optional model-based diagram enhancement."""

from .enhancer import enhance_diagram, merge_diagrams
from .errors import APIError, APIKeyMissingError, EnhancementError, ResponseParseError
from .parser import EnhancedGraph, parse_enhancement_response
from .prompts import SYSTEM_PROMPT, build_enhancement_prompt
from .providers import (
    AliyunProvider,
    ClaudeProvider,
    Completion,
    CompletionProvider,
    OpenAIProvider,
    ProviderKind,
    create_provider,
)

__all__ = [
    "APIError",
    "APIKeyMissingError",
    "AliyunProvider",
    "ClaudeProvider",
    "Completion",
    "CompletionProvider",
    "EnhancedGraph",
    "EnhancementError",
    "OpenAIProvider",
    "ProviderKind",
    "ResponseParseError",
    "SYSTEM_PROMPT",
    "build_enhancement_prompt",
    "create_provider",
    "enhance_diagram",
    "merge_diagrams",
    "parse_enhancement_response",
]
