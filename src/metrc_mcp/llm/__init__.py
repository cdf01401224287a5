"""LLM client entrypoints."""

from ..errors import LLMConfigError
from .client import (
    AnthropicCompletion,
    Completion,
    CompletionPort,
    OpenRouterCompletion,
    build_completion,
)

__all__ = [
    "AnthropicCompletion",
    "Completion",
    "CompletionPort",
    "LLMConfigError",
    "OpenRouterCompletion",
    "build_completion",
]
