"""Logging setup shared by the CLI, the HTTP API and the MCP server.

Everything goes to one root log file. Tool traffic and LLM traffic also get
files of their own and do not propagate to the root file.
"""

from __future__ import annotations

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Dict, Optional, TextIO

TOOL_LOGGER = "metrc_mcp.tool_calls"
LLM_LOGGER = "metrc_mcp.llm"
MCP_LOGGER = "metrc_mcp.mcp"

# logger name -> file suffix; MCP protocol events share the tool log
_DEDICATED_LOGS: Dict[str, str] = {
    TOOL_LOGGER: "tool_calls",
    LLM_LOGGER: "llm",
    MCP_LOGGER: "tool_calls",
}

_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

_CONFIGURED = False


def _truthy(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in {"1", "true", "yes"}


def setup_logging(log_path: Optional[Path] = None, *, console_stream: Optional[TextIO] = None) -> Path:
    """Install file handlers once per process and return the root log path.

    Env: ``METRC_LOG_FILE``, ``METRC_LOG_PREFIX``, ``METRC_LOG_LEVEL``,
    ``METRC_LOG_ROTATE_BYTES``/``METRC_LOG_BACKUP_COUNT`` and
    ``METRC_LOG_STDOUT``. The console handler writes to ``console_stream``
    (stdout when not given); the stdio MCP server passes stderr.
    """
    global _CONFIGURED
    prefix = os.environ.get("METRC_LOG_PREFIX", "").strip() or "metrc"
    root_path = _resolve_log_path(log_path, prefix)
    if _CONFIGURED:
        return root_path

    level = getattr(logging, os.environ.get("METRC_LOG_LEVEL", "INFO").upper(), logging.INFO)
    rotate_bytes = int(os.environ.get("METRC_LOG_ROTATE_BYTES", "0"))
    backup_count = int(os.environ.get("METRC_LOG_BACKUP_COUNT", "3"))
    formatter = logging.Formatter(_FORMAT)
    root_path.parent.mkdir(parents=True, exist_ok=True)

    def file_handler(path: Path) -> logging.Handler:
        handler = _build_handler(path, rotate_bytes=rotate_bytes, backup_count=backup_count)
        handler.setFormatter(formatter)
        return handler

    root = logging.getLogger()
    root.setLevel(level)
    root.addHandler(file_handler(root_path))
    if _truthy("METRC_LOG_STDOUT"):
        console = logging.StreamHandler(console_stream or sys.stdout)
        console.setFormatter(formatter)
        root.addHandler(console)

    handlers: Dict[str, logging.Handler] = {}
    for name, suffix in _DEDICATED_LOGS.items():
        if suffix not in handlers:
            handlers[suffix] = file_handler(root_path.parent / f"{prefix}_{suffix}.log")
        dedicated = logging.getLogger(name)
        dedicated.setLevel(level)
        dedicated.addHandler(handlers[suffix])
        dedicated.propagate = False

    _CONFIGURED = True
    logging.getLogger(__name__).info("Logging initialized: %s", root_path)
    return root_path


def _resolve_log_path(log_path: Optional[Path], prefix: str) -> Path:
    if log_path is not None:
        return log_path
    env_path = os.environ.get("METRC_LOG_FILE")
    if env_path:
        return Path(env_path)
    return Path.cwd() / ".metrc" / "logs" / f"{prefix}.log"


def _build_handler(path: Path, *, rotate_bytes: int, backup_count: int) -> logging.Handler:
    if rotate_bytes <= 0:
        return logging.FileHandler(path, encoding="utf-8")
    return RotatingFileHandler(path, maxBytes=rotate_bytes, backupCount=backup_count, encoding="utf-8")
