"""Flask app factory for the API server."""

from __future__ import annotations

from typing import Callable, Optional

from flask import Flask
from flask_cors import CORS

from ..config import Settings
from ..llm import CompletionPort, build_completion
from ..mcp.server import build_dispatcher
from ..tools import ToolDispatcher
from ..utils.logging import setup_logging
from .routes import register_routes


def create_app(
    *,
    dispatcher: Optional[ToolDispatcher] = None,
    completion_factory: Optional[Callable[[Optional[str]], CompletionPort]] = None,
    settings: Optional[Settings] = None,
) -> Flask:
    """Build the Flask app.

    The completion backend is created per chat request through
    ``completion_factory``, which receives the request's ``model`` (or None)
    so a missing model key only fails ``/api/chat``.
    """
    setup_logging()
    settings = settings or Settings.from_env()
    if dispatcher is None:
        dispatcher = build_dispatcher(settings)

    def default_completion(model: Optional[str] = None) -> CompletionPort:
        return build_completion(settings, model)

    app = Flask(__name__)
    CORS(app, origins=settings.cors_origins or ["*"])
    register_routes(
        app,
        dispatcher=dispatcher,
        completion_factory=completion_factory or default_completion,
        settings=settings,
    )
    return app
