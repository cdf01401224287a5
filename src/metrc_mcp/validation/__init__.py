"""Tool input validation module."""

from .tool_input import ValidationResult, validate_tool_input

__all__ = ["ValidationResult", "validate_tool_input"]
