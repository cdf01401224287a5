"""Tool dispatch: validate, build the METRC request, call the transport."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from pydantic import ValidationError

from ..errors import InvalidToolInputError, ToolError, UnknownToolError
from ..utils.logging import TOOL_LOGGER
from ..validation import validate_tool_input
from .core import RemoteCallSpec, Tool, ToolRegistry, Transport

logger = logging.getLogger(__name__)
_tool_logger = logging.getLogger(TOOL_LOGGER)


@dataclass
class ToolOutcome:
    text: str
    is_error: bool = False


def serialize_result(data: Any) -> str:
    if isinstance(data, str):
        return data
    return json.dumps(data, indent=2)


class ToolDispatcher:
    """Runs tools from a registry against a METRC transport."""

    def __init__(self, registry: ToolRegistry, transport: Optional[Transport] = None):
        self.registry = registry
        self.transport = transport

    def resolve(self, name: str, args: Optional[Dict[str, Any]]) -> RemoteCallSpec:
        """Validate ``args`` for tool ``name`` and build its request.

        Raises:
            UnknownToolError: no tool with that name.
            InvalidToolInputError: validation failed.
            AmbiguousIdentifierError: an id-or-label tool got neither.
        """
        tool = self.registry.get(name)
        if tool is None:
            raise UnknownToolError(name)
        raw = args if args is not None else {}
        if isinstance(raw, dict):
            raw = tool.prepare_args(dict(raw))
        result = validate_tool_input(name, raw, tool.input_schema())
        if not result.valid:
            raise InvalidToolInputError(name, result.errors)
        return tool.build_request(_parse(tool, raw))

    def execute(
        self,
        name: str,
        args: Optional[Dict[str, Any]],
        transport: Optional[Transport] = None,
    ) -> str:
        """Run one tool and return its serialized result. Errors propagate."""
        transport = transport or self.transport
        if transport is None:
            raise RuntimeError("ToolDispatcher has no transport configured")
        spec = self.resolve(name, args)
        logger.debug("Dispatching %s %s %s", name, spec.method, spec.path)
        data = transport(spec.path, spec.params, method=spec.method, body=spec.body)
        return serialize_result(data)

    def call(
        self,
        name: str,
        args: Optional[Dict[str, Any]],
        transport: Optional[Transport] = None,
    ) -> ToolOutcome:
        """Run one tool, turning any failure into an error outcome."""
        _tool_logger.info(
            "tool_request name=%s args=%s",
            name,
            json.dumps(args, ensure_ascii=True, default=str),
        )
        try:
            outcome = ToolOutcome(self.execute(name, args, transport))
        except ToolError as exc:
            outcome = ToolOutcome(f"Error: {exc}", is_error=True)
        except Exception as exc:
            logger.exception("Tool %s failed unexpectedly", name)
            outcome = ToolOutcome(f"Error: {exc}", is_error=True)
        _tool_logger.info(
            "tool_response name=%s is_error=%s bytes=%d",
            name,
            outcome.is_error,
            len(outcome.text.encode("utf-8")),
        )
        return outcome


def _parse(tool: Tool, args: Dict[str, Any]) -> Any:
    try:
        return tool.parse_args(args)
    except ValidationError as exc:
        violations = [
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in exc.errors()
        ]
        raise InvalidToolInputError(tool.name, violations) from exc
