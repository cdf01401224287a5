"""Bounded tool-calling loop between a completion backend and the dispatcher.

Each round makes one completion call. When the reply requests tools, every
call is executed (in parallel when there are several) and the results are
appended in request order, tagged with their call id, before the next
round. The loop ends when a reply has no tool calls or the round limit is
reached; tool calls requested in the last allowed round are not run.
"""

from __future__ import annotations

import json
import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from ..config import MAX_TOOL_ROUNDS
from ..llm.client import CompletionPort
from ..tools import ToolDispatcher, ToolOutcome, Transport
from ..utils.logging import TOOL_LOGGER
from .prompts import SYSTEM_PROMPT, TRUNCATED_REPLY

# (event, tool name, arguments, outcome); outcome is None for "tool_start"
ToolEventCallback = Callable[[str, str, Dict[str, Any], Optional[ToolOutcome]], None]


class TerminationReason(str, Enum):
    MODEL_FINISHED = "model-finished"
    ROUND_LIMIT_REACHED = "round-limit-reached"


class LoopState(str, Enum):
    AWAITING_COMPLETION = "awaiting_completion"
    EXECUTING_TOOLS = "executing_tools"
    DONE = "done"
    TRUNCATED = "truncated"


@dataclass
class ToolCall:
    """A tool request taken from a completion."""

    id: str
    name: str
    arguments: Dict[str, Any]

    @classmethod
    def from_openai(cls, raw: Dict[str, Any], index: int, round_number: int = 1) -> "ToolCall":
        """Build a call from an OpenAI tool_call; a missing id becomes call_<round>_<index>."""
        fn = raw.get("function") or {}
        args_text = fn.get("arguments") or "{}"
        if isinstance(args_text, dict):
            arguments = args_text
        else:
            try:
                arguments = json.loads(args_text)
            except (TypeError, json.JSONDecodeError):
                logging.getLogger(__name__).warning(
                    "Undecodable arguments for %s: %r", fn.get("name"), args_text
                )
                arguments = {}
        if not isinstance(arguments, dict):
            arguments = {}
        return cls(id=raw.get("id") or f"call_{round_number}_{index}", name=fn.get("name") or "", arguments=arguments)

    def to_openai(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": "function",
            "function": {"name": self.name, "arguments": json.dumps(self.arguments)},
        }


@dataclass
class ToolExecution:
    call: ToolCall
    outcome: ToolOutcome


@dataclass
class ConversationState:
    """Append-only message list owned by a single run."""

    _messages: List[Dict[str, Any]] = field(default_factory=list)

    def append(self, message: Dict[str, Any]) -> None:
        self._messages.append(message)

    def snapshot(self) -> List[Dict[str, Any]]:
        return list(self._messages)

    def __len__(self) -> int:
        return len(self._messages)


@dataclass
class ConversationResult:
    final_text: str
    termination_reason: TerminationReason
    rounds: int
    state: LoopState
    tool_executions: List[ToolExecution] = field(default_factory=list)
    messages: List[Dict[str, Any]] = field(default_factory=list)


class Orchestrator:
    """Runs one conversation at a time against a completion backend."""

    def __init__(
        self,
        dispatcher: ToolDispatcher,
        complete: CompletionPort,
        *,
        max_rounds: int = MAX_TOOL_ROUNDS,
        system_prompt: str = SYSTEM_PROMPT,
        max_workers: int = 4,
    ):
        if max_rounds < 1:
            raise ValueError("max_rounds must be at least 1")
        self.dispatcher = dispatcher
        self.complete = complete
        self.max_rounds = max_rounds
        self.system_prompt = system_prompt
        self.max_workers = max(1, max_workers)
        self._logger = logging.getLogger(__name__)
        self._tool_logger = logging.getLogger(TOOL_LOGGER)

    def run(
        self,
        initial_messages: List[Dict[str, Any]],
        *,
        transport: Optional[Transport] = None,
        on_tool_event: Optional[ToolEventCallback] = None,
    ) -> ConversationResult:
        """Drive the loop to completion.

        Completion failures propagate. Tool failures become error text in
        the matching tool message.
        """
        if not initial_messages:
            raise ValueError("initial_messages must not be empty")
        conversation = ConversationState()
        if not any(msg.get("role") == "system" for msg in initial_messages):
            conversation.append({"role": "system", "content": self.system_prompt})
        for message in initial_messages:
            conversation.append(dict(message))

        executions: List[ToolExecution] = []
        last_text = ""
        rounds = 0
        loop_state = LoopState.AWAITING_COMPLETION
        while True:
            rounds += 1
            tools = self.dispatcher.registry.to_openai_tools() if rounds == 1 else None
            self._logger.info(
                "Completion round=%d messages=%d tools_attached=%s",
                rounds,
                len(conversation),
                tools is not None,
            )
            completion = self.complete(conversation.snapshot(), tools)
            text = completion.text or ""
            if text.strip():
                last_text = text
            calls = [
                ToolCall.from_openai(raw, idx, rounds)
                for idx, raw in enumerate(completion.tool_calls or [])
            ]

            if not calls:
                conversation.append({"role": "assistant", "content": text})
                loop_state = LoopState.DONE
                return ConversationResult(
                    final_text=text,
                    termination_reason=TerminationReason.MODEL_FINISHED,
                    rounds=rounds,
                    state=loop_state,
                    tool_executions=executions,
                    messages=conversation.snapshot(),
                )

            if rounds >= self.max_rounds:
                self._logger.warning(
                    "Round limit %d reached with %d tool calls pending",
                    self.max_rounds,
                    len(calls),
                )
                conversation.append({"role": "assistant", "content": text})
                loop_state = LoopState.TRUNCATED
                return ConversationResult(
                    final_text=last_text or TRUNCATED_REPLY,
                    termination_reason=TerminationReason.ROUND_LIMIT_REACHED,
                    rounds=rounds,
                    state=loop_state,
                    tool_executions=executions,
                    messages=conversation.snapshot(),
                )

            loop_state = LoopState.EXECUTING_TOOLS
            conversation.append(
                {
                    "role": "assistant",
                    "content": text,
                    "tool_calls": [call.to_openai() for call in calls],
                }
            )
            outcomes = self._execute_round(calls, transport, on_tool_event)
            for call, outcome in zip(calls, outcomes):
                conversation.append({"role": "tool", "tool_call_id": call.id, "content": outcome.text})
                executions.append(ToolExecution(call=call, outcome=outcome))
            loop_state = LoopState.AWAITING_COMPLETION

    def _execute_round(
        self,
        calls: List[ToolCall],
        transport: Optional[Transport],
        on_tool_event: Optional[ToolEventCallback],
    ) -> List[ToolOutcome]:
        if on_tool_event:
            for call in calls:
                on_tool_event("tool_start", call.name, call.arguments, None)

        outcomes: List[Optional[ToolOutcome]] = [None] * len(calls)
        if len(calls) == 1 or self.max_workers == 1:
            for idx, call in enumerate(calls):
                outcomes[idx] = self.dispatcher.call(call.name, call.arguments, transport)
                self._notify_complete(on_tool_event, call, outcomes[idx])
        else:
            with ThreadPoolExecutor(max_workers=min(self.max_workers, len(calls))) as executor:
                futures = {
                    executor.submit(self.dispatcher.call, call.name, call.arguments, transport): idx
                    for idx, call in enumerate(calls)
                }
                for future in as_completed(futures):
                    idx = futures[future]
                    outcomes[idx] = future.result()
                    self._notify_complete(on_tool_event, calls[idx], outcomes[idx])
        return [outcome for outcome in outcomes if outcome is not None]

    def _notify_complete(
        self,
        on_tool_event: Optional[ToolEventCallback],
        call: ToolCall,
        outcome: Optional[ToolOutcome],
    ) -> None:
        if outcome is not None and outcome.is_error:
            self._tool_logger.error("tool_error name=%s id=%s error=%s", call.name, call.id, outcome.text)
        if on_tool_event:
            on_tool_event("tool_complete", call.name, call.arguments, outcome)
