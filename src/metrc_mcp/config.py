"""Environment-backed settings."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_METRC_API_URL = "https://sandbox-api-co.metrc.com"
DEFAULT_OPENROUTER_URL = "https://openrouter.ai/api/v1/chat/completions"
DEFAULT_OPENROUTER_MODEL = "openai/gpt-4o"
DEFAULT_ANTHROPIC_MODEL = "claude-sonnet-4-5"
MAX_TOOL_ROUNDS = 8

_ENV_LOADED = False


def load_env(env_path: Optional[Path] = None) -> None:
    """Load a .env file once; existing environment variables win."""
    global _ENV_LOADED
    if _ENV_LOADED and env_path is None:
        return
    if env_path is None:
        env_path = Path.cwd() / ".env"
    if env_path.exists():
        logger.debug("Loading env from %s", env_path)
        load_dotenv(env_path, override=False)
    _ENV_LOADED = True


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring non-integer %s=%r", name, raw)
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("Ignoring non-numeric %s=%r", name, raw)
        return default


@dataclass
class Settings:
    metrc_api_url: str = DEFAULT_METRC_API_URL
    metrc_vendor_api_key: str = ""
    metrc_user_api_key: str = ""
    metrc_timeout: float = 30.0
    llm_provider: str = "anthropic"
    anthropic_api_key: str = ""
    anthropic_model: str = DEFAULT_ANTHROPIC_MODEL
    anthropic_base_url: Optional[str] = None
    openrouter_api_key: str = ""
    openrouter_model: str = DEFAULT_OPENROUTER_MODEL
    openrouter_url: str = DEFAULT_OPENROUTER_URL
    max_tool_rounds: int = MAX_TOOL_ROUNDS
    tool_workers: int = 4
    cors_origins: List[str] = field(default_factory=list)

    @classmethod
    def from_env(cls) -> "Settings":
        load_env()
        cors_raw = os.environ.get("METRC_CORS_ORIGINS", "").strip()
        return cls(
            metrc_api_url=os.environ.get("METRC_API_URL", "").strip() or DEFAULT_METRC_API_URL,
            metrc_vendor_api_key=os.environ.get("METRC_VENDOR_API_KEY", "").strip(),
            metrc_user_api_key=os.environ.get("METRC_USER_API_KEY", "").strip(),
            metrc_timeout=_env_float("METRC_TIMEOUT", 30.0),
            llm_provider=(os.environ.get("METRC_LLM_PROVIDER", "").strip().lower() or "anthropic"),
            anthropic_api_key=os.environ.get("ANTHROPIC_API_KEY", "").strip(),
            anthropic_model=os.environ.get("ANTHROPIC_MODEL", "").strip() or DEFAULT_ANTHROPIC_MODEL,
            anthropic_base_url=os.environ.get("ANTHROPIC_BASE_URL", "").strip() or None,
            openrouter_api_key=os.environ.get("OPENROUTER_API_KEY", "").strip(),
            openrouter_model=os.environ.get("OPENROUTER_MODEL", "").strip() or DEFAULT_OPENROUTER_MODEL,
            openrouter_url=os.environ.get("OPENROUTER_URL", "").strip() or DEFAULT_OPENROUTER_URL,
            max_tool_rounds=max(1, _env_int("METRC_MAX_TOOL_ROUNDS", MAX_TOOL_ROUNDS)),
            tool_workers=max(1, _env_int("METRC_TOOL_WORKERS", 4)),
            cors_origins=[o.strip() for o in cors_raw.split(",") if o.strip()] or ["*"],
        )
