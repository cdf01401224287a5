"""Agent loop over the METRC tool catalog."""

from .orchestrator import (
    ConversationResult,
    ConversationState,
    LoopState,
    Orchestrator,
    TerminationReason,
    ToolCall,
    ToolExecution,
)
from .prompts import SYSTEM_PROMPT

__all__ = [
    "ConversationResult",
    "ConversationState",
    "LoopState",
    "Orchestrator",
    "SYSTEM_PROMPT",
    "TerminationReason",
    "ToolCall",
    "ToolExecution",
]
