"""Pre-flight validation of tool arguments against a tool's input schema.

Only required fields and primitive kinds are checked. Keys the schema does
not declare are ignored, so a passing result says nothing about whether
METRC will accept the call.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    errors: Tuple[str, ...] = ()

    def message(self, tool_name: str) -> str:
        return f"Invalid input for {tool_name}: {'; '.join(self.errors)}"


def describe_kind(value: Any) -> str:
    """Name the primitive kind of a decoded JSON value."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        if isinstance(value, float) and math.isnan(value):
            return "NaN"
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (list, tuple)):
        return "array"
    if isinstance(value, Mapping):
        return "object"
    return type(value).__name__


def _matches(kind: str, value: Any) -> bool:
    if kind == "string":
        return isinstance(value, str)
    if kind == "number":
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return False
        return not (isinstance(value, float) and math.isnan(value))
    if kind == "boolean":
        return isinstance(value, bool)
    if kind == "array":
        return isinstance(value, (list, tuple))
    if kind == "object":
        return isinstance(value, Mapping)
    # Unknown declared kinds are not enforced.
    return True


def check_type(key: str, value: Any, expected: str) -> Optional[str]:
    if _matches(expected, value):
        return None
    return f"{key}: expected {expected}, got {describe_kind(value)}"


def validate_tool_input(
    tool_name: str,
    args: Any,
    input_schema: Mapping[str, Any],
) -> ValidationResult:
    """Check ``args`` against ``input_schema``; every violation is collected."""
    if not isinstance(args, Mapping):
        return ValidationResult(False, (f"arguments: expected object, got {describe_kind(args)}",))

    properties: Dict[str, Any] = dict(input_schema.get("properties") or {})
    required: List[str] = list(input_schema.get("required") or [])
    errors: List[str] = []

    for field_name in required:
        if args.get(field_name) is None:
            description = (properties.get(field_name) or {}).get("description")
            hint = f" ({description})" if description else ""
            errors.append(f"Missing required field: {field_name}{hint}")

    for key, value in args.items():
        if value is None:
            continue
        expected = (properties.get(key) or {}).get("type")
        if not expected:
            continue
        error = check_type(key, value, expected)
        if error:
            errors.append(error)

    return ValidationResult(not errors, tuple(errors))
