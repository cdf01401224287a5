"""HTTP routes for the API server."""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional

import httpx
from flask import Flask, jsonify, request

from ..agents import Orchestrator
from ..config import Settings
from ..llm import CompletionPort
from ..tools import ToolDispatcher, ToolOutcome

logger = logging.getLogger("metrc_mcp.api")

PARSE_ERROR = -32700
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602


def _rpc_error(request_id: Any, code: int, message: str, status: int) -> Any:
    body = {"jsonrpc": "2.0", "id": request_id, "error": {"code": code, "message": message}}
    return jsonify(body), status


def _rpc_result(request_id: Any, result: Dict[str, Any]) -> Any:
    return jsonify({"jsonrpc": "2.0", "id": request_id, "result": result})


def _tool_result(outcome: ToolOutcome) -> Dict[str, Any]:
    result: Dict[str, Any] = {"content": [{"type": "text", "text": outcome.text}]}
    if outcome.is_error:
        result["isError"] = True
    return result


def _chat_messages(payload: Any) -> List[Dict[str, Any]]:
    if not isinstance(payload, dict):
        return []
    messages = payload.get("messages")
    conversation = [msg for msg in messages if isinstance(msg, dict)] if isinstance(messages, list) else []
    message = payload.get("message")
    if isinstance(message, str) and message.strip():
        conversation.append({"role": "user", "content": message.strip()})
    return conversation


def _requested_model(payload: Any) -> Optional[str]:
    model = payload.get("model") if isinstance(payload, dict) else None
    if isinstance(model, str) and model.strip():
        return model.strip()
    return None


def _upstream_status(exc: Exception) -> Optional[int]:
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code
    status = getattr(exc, "status_code", None)
    return status if isinstance(status, int) else None


def register_routes(
    app: Flask,
    *,
    dispatcher: ToolDispatcher,
    completion_factory: Callable[[Optional[str]], CompletionPort],
    settings: Settings,
) -> None:
    @app.before_request
    def log_request() -> None:
        logger.info("HTTP %s %s from %s", request.method, request.path, request.remote_addr)

    @app.route("/api/mcp", methods=["GET", "POST", "PUT", "DELETE", "PATCH"])
    def mcp_rpc() -> Any:
        if request.method != "POST":
            return jsonify({"error": "Method not allowed"}), 405
        payload = request.get_json(force=True, silent=True)
        if not isinstance(payload, dict):
            return _rpc_error(None, PARSE_ERROR, "Parse error", 400)

        request_id = payload.get("id")
        if request_id is None:
            request_id = 1
        method = payload.get("method")
        params = payload.get("params") or {}

        if method == "tools/list":
            tools = dispatcher.registry.to_mcp_tools()
            return _rpc_result(request_id, {"tools": tools})

        if method == "tools/call":
            name = params.get("name") if isinstance(params, dict) else None
            if not name:
                return _rpc_error(request_id, INVALID_PARAMS, "Missing tool name", 400)
            outcome = dispatcher.call(name, params.get("arguments") or {})
            return _rpc_result(request_id, _tool_result(outcome))

        return _rpc_error(request_id, METHOD_NOT_FOUND, f"Method not found: {method}", 404)

    @app.post("/api/chat")
    def chat() -> Any:
        payload = request.get_json(force=True, silent=True)
        if payload is None:
            return jsonify({"error": "Invalid JSON body"}), 400
        messages = _chat_messages(payload)
        if not messages:
            return jsonify({"error": 'Provide "message" or "messages" in the request body'}), 400

        try:
            orchestrator = Orchestrator(
                dispatcher,
                completion_factory(_requested_model(payload)),
                max_rounds=settings.max_tool_rounds,
                max_workers=settings.tool_workers,
            )
            result = orchestrator.run(messages)
        except Exception as exc:
            logger.exception("Chat completion failed")
            return (
                jsonify(
                    {
                        "error": "Language model request failed",
                        "status": _upstream_status(exc),
                        "detail": str(exc),
                    }
                ),
                502,
            )

        return jsonify(
            {
                "message": result.final_text,
                "role": "assistant",
                "termination_reason": result.termination_reason.value,
                "rounds": result.rounds,
            }
        )
