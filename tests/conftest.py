"""Shared fixtures for the METRC tool tests.

The recording transport stands in for METRC: it remembers every request
and answers with a canned response or raises a canned error.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import pytest

from metrc_mcp.tools import ToolDispatcher, ToolRegistry, build_tool_registry

LICENSE_NUMBER = "SF-SBX-CO-1-8002"


class RecordingTransport:
    """Transport double that records calls."""

    def __init__(self, response: Any = None, error: Optional[Exception] = None):
        self.response = [] if response is None else response
        self.error = error
        self.calls: List[Dict[str, Any]] = []

    def __call__(self, path: str, params: Dict[str, Any], *, method: str = "GET", body: Any = None) -> Any:
        self.calls.append({"path": path, "params": dict(params), "method": method, "body": body})
        if self.error is not None:
            raise self.error
        return self.response

    @property
    def last(self) -> Dict[str, Any]:
        return self.calls[-1]


@pytest.fixture(scope="session")
def registry() -> ToolRegistry:
    """The full discovered catalog."""
    return build_tool_registry()


@pytest.fixture
def transport() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture
def dispatcher(registry: ToolRegistry, transport: RecordingTransport) -> ToolDispatcher:
    """Dispatcher over the full catalog wired to the recording transport."""
    return ToolDispatcher(registry, transport)
