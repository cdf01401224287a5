"""Tool registry and METRC tools."""

from .core import RemoteCallSpec, Tool, ToolArgs, ToolParameter, ToolRegistry, Transport
from .discovery import build_tool_registry, discover_tool_classes
from .dispatcher import ToolDispatcher, ToolOutcome, serialize_result

__all__ = [
    "RemoteCallSpec",
    "Tool",
    "ToolArgs",
    "ToolParameter",
    "ToolRegistry",
    "Transport",
    "ToolDispatcher",
    "ToolOutcome",
    "build_tool_registry",
    "discover_tool_classes",
    "serialize_result",
]
