"""METRC cannabis-compliance tool catalog, MCP server and agent loop."""

__version__ = "0.1.0"
