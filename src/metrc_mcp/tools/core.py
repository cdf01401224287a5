"""Core tool abstractions and registry."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Sequence, Tuple, Type, Union
from urllib.parse import quote

from pydantic import BaseModel, ConfigDict, StrictBool, StrictFloat, StrictInt, StrictStr, create_model

PARAMETER_KINDS = ("string", "number", "boolean", "array", "object")

_KIND_ANNOTATIONS: Dict[str, Any] = {
    "string": StrictStr,
    "number": Union[StrictInt, StrictFloat],
    "boolean": StrictBool,
    "array": List[Any],
    "object": Dict[str, Any],
}


@dataclass(frozen=True)
class ToolParameter:
    name: str
    type: str
    description: str = ""
    required: bool = True
    # JSON schema for array elements
    items: Optional[Dict[str, Any]] = None

    def __post_init__(self) -> None:
        if self.type not in PARAMETER_KINDS:
            raise ValueError(f"Unsupported parameter type for {self.name}: {self.type}")

    def to_schema(self) -> Dict[str, Any]:
        schema: Dict[str, Any] = {"type": self.type}
        if self.description:
            schema["description"] = self.description
        if self.items is not None:
            schema["items"] = self.items
        return schema


@dataclass
class RemoteCallSpec:
    """One METRC request: path, method, query params and optional body."""

    path: str
    method: str = "GET"
    params: Dict[str, Any] = field(default_factory=dict)
    body: Any = None


class Transport(Protocol):
    def __call__(
        self,
        path: str,
        params: Dict[str, Any],
        *,
        method: str = "GET",
        body: Any = None,
    ) -> Any:
        ...


class ToolArgs(BaseModel):
    """Typed view over validated tool arguments."""

    model_config = ConfigDict(extra="allow", strict=True, frozen=True)


_ARGS_MODELS: Dict[type, Type[ToolArgs]] = {}


class Tool:
    name: str
    description: str
    parameters: Tuple[ToolParameter, ...] = ()

    def prepare_args(self, args: Dict[str, Any]) -> Dict[str, Any]:
        """Normalize raw arguments before validation. Default is a no-op."""
        return args

    def build_request(self, args: Any) -> RemoteCallSpec:
        raise NotImplementedError

    def input_schema(self) -> Dict[str, Any]:
        return {
            "type": "object",
            "properties": {param.name: param.to_schema() for param in self.parameters},
            "required": [param.name for param in self.parameters if param.required],
        }

    @classmethod
    def args_model(cls) -> Type[ToolArgs]:
        model = _ARGS_MODELS.get(cls)
        if model is None:
            fields: Dict[str, Any] = {}
            for param in cls.parameters:
                annotation = _KIND_ANNOTATIONS[param.type]
                if param.required:
                    fields[param.name] = (annotation, ...)
                else:
                    fields[param.name] = (Optional[annotation], None)
            model = create_model(f"{cls.__name__}Args", __base__=ToolArgs, **fields)
            _ARGS_MODELS[cls] = model
        return model

    def parse_args(self, args: Dict[str, Any]) -> ToolArgs:
        return self.args_model().model_validate(args)

    def to_openai_tool(self) -> Dict[str, Any]:
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.input_schema(),
            },
        }

    def to_mcp_tool(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema(),
        }


class ToolRegistry:
    """Ordered, name-unique collection of tools."""

    def __init__(self, tools: Sequence[Tool] = ()) -> None:
        self._tools: Dict[str, Tool] = {}
        for tool in tools:
            self.register(tool)

    def register(self, tool: Tool) -> None:
        if tool.name in self._tools:
            raise ValueError(f"Duplicate tool name: {tool.name}")
        self._tools[tool.name] = tool

    def get(self, name: str) -> Optional[Tool]:
        return self._tools.get(name)

    def list_tools(self) -> List[Tool]:
        return list(self._tools.values())

    def names(self) -> List[str]:
        return list(self._tools)

    def to_openai_tools(self) -> List[Dict[str, Any]]:
        return [tool.to_openai_tool() for tool in self._tools.values()]

    def to_mcp_tools(self) -> List[Dict[str, Any]]:
        return [tool.to_mcp_tool() for tool in self._tools.values()]

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)


def path_segment(value: Any) -> str:
    """Render an id or label for embedding in a URL path."""
    if isinstance(value, float) and math.isfinite(value) and value.is_integer():
        value = int(value)
    return quote(str(value), safe="!~*'()")


def drop_none(values: Dict[str, Any], *, keep: Sequence[str] = ()) -> Dict[str, Any]:
    return {key: value for key, value in values.items() if value is not None or key in keep}
