"""HTTP surfaces for the METRC tool catalog."""

from .app import create_app

__all__ = ["create_app"]
