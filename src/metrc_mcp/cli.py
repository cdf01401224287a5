"""CLI entrypoint for the METRC tool catalog."""

from __future__ import annotations

import argparse
import json
import sys
from typing import Any, Dict, List, Optional

from .agents import Orchestrator
from .config import Settings
from .llm import build_completion
from .mcp.server import build_dispatcher
from .utils.logging import setup_logging


def build_orchestrator(settings: Settings) -> Orchestrator:
    return Orchestrator(
        build_dispatcher(settings),
        build_completion(settings),
        max_rounds=settings.max_tool_rounds,
        max_workers=settings.tool_workers,
    )


def run_repl(orchestrator: Orchestrator) -> None:
    print("METRC agent (type 'exit' to quit)")
    history: List[Dict[str, Any]] = []
    while True:
        try:
            user_message = input("> ").strip()
        except EOFError:
            break
        if not user_message:
            continue
        if user_message.lower() in {"exit", "quit"}:
            break
        result = orchestrator.run(history + [{"role": "user", "content": user_message}])
        history = result.messages
        print(result.final_text)


def _list_tools(settings: Settings) -> int:
    for tool in build_dispatcher(settings).registry.list_tools():
        summary = tool.description.split("\n", 1)[0]
        print(f"{tool.name}\t{summary}")
    return 0


def _call_tool(settings: Settings, name: str, raw_args: str) -> int:
    try:
        arguments = json.loads(raw_args)
    except json.JSONDecodeError as exc:
        print(f"Invalid --args JSON: {exc}", file=sys.stderr)
        return 2
    outcome = build_dispatcher(settings).call(name, arguments)
    print(outcome.text)
    return 1 if outcome.is_error else 0


def _chat(settings: Settings, one_shot: Optional[str]) -> int:
    orchestrator = build_orchestrator(settings)
    if one_shot:
        result = orchestrator.run([{"role": "user", "content": one_shot}])
        print(result.final_text)
        return 0
    run_repl(orchestrator)
    return 0


def _serve_api(settings: Settings, host: str, port: int, debug: bool) -> int:
    from .api import create_app

    app = create_app(settings=settings)
    app.run(host=host, port=port, debug=debug)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="metrc-mcp", description="METRC tool catalog CLI")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("tools", help="List the tool catalog")

    call = sub.add_parser("call", help="Invoke one tool directly")
    call.add_argument("name", help="Tool name, e.g. metrc_get_facilities")
    call.add_argument("--args", default="{}", help="Tool arguments as a JSON object")

    chat = sub.add_parser("chat", help="Talk to the agent loop")
    chat.add_argument("--one-shot", help="Run a single prompt and exit")

    sub.add_parser("serve-mcp", help="Run the MCP server over stdio")

    api = sub.add_parser("serve-api", help="Run the HTTP API server")
    api.add_argument("--host", default="127.0.0.1")
    api.add_argument("--port", type=int, default=5001)
    api.add_argument("--debug", action="store_true")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    if args.command == "serve-mcp":
        from .mcp.server import main as serve_mcp

        serve_mcp()
        return 0

    setup_logging()
    settings = Settings.from_env()
    if args.command == "tools":
        return _list_tools(settings)
    if args.command == "call":
        return _call_tool(settings, args.name, args.args)
    if args.command == "chat":
        return _chat(settings, args.one_shot)
    return _serve_api(settings, args.host, args.port, args.debug)


if __name__ == "__main__":
    sys.exit(main())
