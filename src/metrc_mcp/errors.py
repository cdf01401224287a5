"""Error taxonomy for tool dispatch and the completion backends."""

from __future__ import annotations

from typing import List, Optional, Sequence


class ToolError(Exception):
    """Base class for errors recovered into a textual tool result."""


class UnknownToolError(ToolError):
    """Raised when the catalog has no tool with the requested name."""

    def __init__(self, name: str):
        super().__init__(f"Unknown tool: {name}")
        self.tool_name = name


class InvalidToolInputError(ToolError):
    """Raised when arguments fail validation; carries every violation."""

    def __init__(self, name: str, violations: Sequence[str]):
        self.tool_name = name
        self.violations: List[str] = list(violations)
        super().__init__(f"Invalid input for {name}: {'; '.join(self.violations)}")


class AmbiguousIdentifierError(ToolError):
    """Raised when none of the alternative identifying fields was supplied."""

    def __init__(self, *fields: str):
        self.fields = fields
        super().__init__(f"Provide {' or '.join(fields)}")


class TransportError(ToolError):
    """Exception raised for METRC API errors."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class MetrcConfigError(TransportError):
    """Raised when METRC credentials are missing."""


class LLMConfigError(RuntimeError):
    """Raised when LLM environment is missing or invalid."""
