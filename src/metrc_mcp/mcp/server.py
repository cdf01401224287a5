"""MCP server exposing the METRC tool catalog over stdio.

The low-level server is used so each tool keeps its declarative JSON
schema. SDK-side input validation is disabled because the dispatcher's
validator produces the error text clients see.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Any, Dict, List, Optional

import anyio
import anyio.to_thread
import mcp.types as types
from mcp.server.lowlevel import Server
from mcp.server.stdio import stdio_server

from ..config import Settings
from ..services import MetrcClient
from ..tools import ToolDispatcher, ToolRegistry, build_tool_registry
from ..utils.logging import MCP_LOGGER, setup_logging

logger = logging.getLogger(MCP_LOGGER)

SERVER_NAME = "metrc-mcp"


def list_tool_definitions(registry: ToolRegistry) -> List[types.Tool]:
    return [
        types.Tool(name=tool.name, description=tool.description, inputSchema=tool.input_schema())
        for tool in registry.list_tools()
    ]


async def call_tool_content(
    dispatcher: ToolDispatcher,
    name: str,
    arguments: Optional[Dict[str, Any]],
) -> List[types.TextContent]:
    """Run a tool off the event loop. Raises RuntimeError on tool errors."""
    outcome = await anyio.to_thread.run_sync(dispatcher.call, name, arguments or {})
    if outcome.is_error:
        # The SDK turns a raised handler error into an isError result.
        raise RuntimeError(outcome.text)
    return [types.TextContent(type="text", text=outcome.text)]


def build_mcp_server(dispatcher: ToolDispatcher) -> Server:
    server: Server = Server(SERVER_NAME)

    @server.list_tools()
    async def _list_tools() -> List[types.Tool]:
        return list_tool_definitions(dispatcher.registry)

    @server.call_tool(validate_input=False)
    async def _call_tool(name: str, arguments: Dict[str, Any]) -> List[types.TextContent]:
        logger.info("MCP call_tool name=%s", name)
        return await call_tool_content(dispatcher, name, arguments)

    return server


def build_dispatcher(settings: Optional[Settings] = None) -> ToolDispatcher:
    settings = settings or Settings.from_env()
    return ToolDispatcher(build_tool_registry(), MetrcClient.from_settings(settings))


def _resolve_transport() -> str:
    raw = os.environ.get("MCP_TRANSPORT", "stdio").strip().lower()
    if raw != "stdio":
        raise ValueError(f"Unknown MCP_TRANSPORT '{raw}'. Only stdio is supported.")
    return raw


async def serve_stdio(server: Server) -> None:
    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())


def main() -> None:
    setup_logging(console_stream=sys.stderr)
    transport = _resolve_transport()
    dispatcher = build_dispatcher()
    server = build_mcp_server(dispatcher)
    logger.info("Starting MCP server transport=%s tools=%d", transport, len(dispatcher.registry))
    anyio.run(serve_stdio, server)


if __name__ == "__main__":
    main()
