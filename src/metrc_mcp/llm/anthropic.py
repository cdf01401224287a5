"""Translation between the OpenAI chat shape and Anthropic messages.

The agent loop keeps its conversation as OpenAI-style dicts. Anthropic
wants the system text separately, tool calls as ``tool_use`` blocks on the
assistant turn, and every ``tool_result`` of a turn inside one user
message.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional, Tuple

from ..utils.logging import LLM_LOGGER

logger = logging.getLogger(LLM_LOGGER)

Block = Dict[str, Any]


def _attr(obj: Any, name: str) -> Any:
    # SDK responses are objects; recorded fixtures are dicts.
    if isinstance(obj, dict):
        return obj.get(name)
    return getattr(obj, name, None)


def _text_blocks(content: Any) -> List[Block]:
    if not content:
        return []
    if isinstance(content, str):
        return [{"type": "text", "text": content}]
    if isinstance(content, list):
        return [
            {"type": "text", "text": part["text"]}
            for part in content
            if isinstance(part, dict) and part.get("type") == "text" and part.get("text")
        ]
    return [{"type": "text", "text": json.dumps(content, ensure_ascii=True)}]


def _plain_text(content: Any) -> str:
    return "".join(block["text"] for block in _text_blocks(content))


def _tool_input(raw: Any) -> Dict[str, Any]:
    if isinstance(raw, dict):
        return raw
    if not isinstance(raw, str):
        return {}
    try:
        decoded = json.loads(raw or "{}")
    except json.JSONDecodeError:
        logger.warning("Dropping undecodable tool arguments: %s", raw[:200])
        return {}
    return decoded if isinstance(decoded, dict) else {}


def _tool_use(call: Dict[str, Any]) -> Block:
    fn = call.get("function") or {}
    return {
        "type": "tool_use",
        "id": call.get("id") or "",
        "name": fn.get("name"),
        "input": _tool_input(fn.get("arguments")),
    }


def _tool_result(msg: Dict[str, Any]) -> Block:
    content = msg.get("content", "")
    if not isinstance(content, str):
        content = json.dumps(content, ensure_ascii=True)
    return {"type": "tool_result", "tool_use_id": msg.get("tool_call_id") or "", "content": content}


def _ends_with_results(turn: Optional[Dict[str, Any]]) -> bool:
    if turn is None or turn["role"] != "user" or not turn["content"]:
        return False
    return turn["content"][-1].get("type") == "tool_result"


def convert_tools(tools: Optional[List[Dict[str, Any]]]) -> List[Dict[str, Any]]:
    """OpenAI function definitions to Anthropic tool definitions."""
    converted: List[Dict[str, Any]] = []
    for tool in tools or []:
        fn = tool.get("function") if isinstance(tool, dict) else None
        if not fn:
            continue
        converted.append(
            {
                "name": fn.get("name"),
                "description": fn.get("description") or "",
                "input_schema": fn.get("parameters") or {"type": "object", "properties": {}},
            }
        )
    return converted


def convert_messages(messages: List[Dict[str, Any]]) -> Tuple[str, List[Dict[str, Any]]]:
    """Return ``(system, turns)`` for the Anthropic messages API."""
    system: List[str] = []
    turns: List[Dict[str, Any]] = []
    for msg in messages:
        role = msg.get("role")
        if role == "system":
            text = _plain_text(msg.get("content"))
            if text:
                system.append(text)
        elif role == "tool":
            previous = turns[-1] if turns else None
            if _ends_with_results(previous):
                previous["content"].append(_tool_result(msg))
            else:
                turns.append({"role": "user", "content": [_tool_result(msg)]})
        elif role == "assistant" and msg.get("tool_calls"):
            blocks = _text_blocks(msg.get("content"))
            blocks.extend(_tool_use(call) for call in msg["tool_calls"])
            turns.append({"role": "assistant", "content": blocks})
        elif role in ("user", "assistant"):
            blocks = _text_blocks(msg.get("content"))
            if blocks:
                turns.append({"role": role, "content": blocks})
    return "\n\n".join(system), turns


def parse_response(message: Any) -> Tuple[str, List[Dict[str, Any]]]:
    """Split an Anthropic reply into text and OpenAI-style tool calls."""
    text = ""
    tool_calls: List[Dict[str, Any]] = []
    for block in _attr(message, "content") or []:
        kind = _attr(block, "type")
        if kind == "text":
            text += _attr(block, "text") or ""
        elif kind == "tool_use":
            tool_calls.append(
                {
                    "id": _attr(block, "id"),
                    "type": "function",
                    "function": {
                        "name": _attr(block, "name"),
                        "arguments": json.dumps(_attr(block, "input") or {}, ensure_ascii=True, default=str),
                    },
                }
            )
    return text, tool_calls
