"""Model-completion backends.

Each backend is a callable ``complete(messages, tools) -> Completion`` over
OpenAI-shaped messages. ``tools`` is the OpenAI function list, or None
when the loop does not attach the catalog.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol

import httpx
from anthropic import Anthropic

from ..config import Settings
from ..errors import LLMConfigError
from ..utils.logging import LLM_LOGGER
from .anthropic import (
    convert_messages,
    convert_tools,
    parse_response,
)

logger = logging.getLogger(LLM_LOGGER)

DEFAULT_MAX_TOKENS = 4096


@dataclass
class Completion:
    text: str = ""
    # OpenAI-style: {"id", "type": "function", "function": {"name", "arguments"}}
    tool_calls: List[Dict[str, Any]] = field(default_factory=list)


class CompletionPort(Protocol):
    def __call__(
        self,
        messages: List[Dict[str, Any]],
        tools: Optional[List[Dict[str, Any]]] = None,
    ) -> Completion:
        ...


class AnthropicCompletion:
    """Completion backend on the Anthropic Messages API.

    Anthropic rejects a conversation holding tool_use blocks unless tool
    definitions accompany the request, so the last catalog seen is resent
    on later rounds.
    """

    def __init__(self, client: Any, model: str, *, max_tokens: int = DEFAULT_MAX_TOKENS):
        self._client = client
        self.model = model
        self.max_tokens = max_tokens
        self._tools: List[Dict[str, Any]] = []

    @classmethod
    def from_settings(cls, settings: Settings, model: Optional[str] = None) -> "AnthropicCompletion":
        if not settings.anthropic_api_key:
            raise LLMConfigError("Missing ANTHROPIC_API_KEY.")
        kwargs: Dict[str, Any] = {"api_key": settings.anthropic_api_key}
        if settings.anthropic_base_url:
            kwargs["base_url"] = settings.anthropic_base_url
        return cls(Anthropic(**kwargs), model or settings.anthropic_model)

    def __call__(
        self,
        messages: List[Dict[str, Any]],
        tools: Optional[List[Dict[str, Any]]] = None,
    ) -> Completion:
        if tools:
            self._tools = convert_tools(tools)
        system, converted = convert_messages(messages)
        payload: Dict[str, Any] = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "messages": converted,
        }
        if system:
            payload["system"] = system
        if self._tools:
            payload["tools"] = self._tools
        start = time.perf_counter()
        message = self._client.messages.create(**payload)
        elapsed_ms = (time.perf_counter() - start) * 1000
        text, tool_calls = parse_response(message)
        logger.info(
            "Anthropic completion ms=%.1f messages=%d tool_calls=%d",
            elapsed_ms,
            len(messages),
            len(tool_calls),
        )
        return Completion(text=text, tool_calls=tool_calls)


class OpenRouterCompletion:
    """Completion backend on an OpenAI-compatible chat completions endpoint."""

    def __init__(
        self,
        api_key: str,
        model: str,
        *,
        endpoint: str,
        timeout: float = 120.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.api_key = api_key
        self.model = model
        self.endpoint = endpoint
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings, model: Optional[str] = None) -> "OpenRouterCompletion":
        if not settings.openrouter_api_key:
            raise LLMConfigError("Missing OPENROUTER_API_KEY.")
        return cls(
            settings.openrouter_api_key,
            model or settings.openrouter_model,
            endpoint=settings.openrouter_url,
        )

    def __call__(
        self,
        messages: List[Dict[str, Any]],
        tools: Optional[List[Dict[str, Any]]] = None,
    ) -> Completion:
        payload: Dict[str, Any] = {"model": self.model, "messages": messages}
        if tools:
            payload["tools"] = tools
            payload["tool_choice"] = "auto"
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        start = time.perf_counter()
        with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
            response = client.post(self.endpoint, headers=headers, json=payload)
            response.raise_for_status()
            data = response.json()
        elapsed_ms = (time.perf_counter() - start) * 1000
        choices = data.get("choices") or []
        if not choices:
            raise RuntimeError(f"Completion response had no choices: {data.get('error') or data}")
        message = choices[0].get("message") or {}
        tool_calls = message.get("tool_calls") or []
        logger.info(
            "OpenRouter completion ms=%.1f messages=%d tool_calls=%d",
            elapsed_ms,
            len(messages),
            len(tool_calls),
        )
        return Completion(text=message.get("content") or "", tool_calls=tool_calls)


def build_completion(settings: Settings, model: Optional[str] = None) -> CompletionPort:
    """Backend for the configured provider; ``model`` overrides its default model."""
    provider = settings.llm_provider
    if provider == "anthropic":
        return AnthropicCompletion.from_settings(settings, model)
    if provider == "openrouter":
        return OpenRouterCompletion.from_settings(settings, model)
    raise LLMConfigError(f"Unknown METRC_LLM_PROVIDER '{provider}'. Use anthropic or openrouter.")
