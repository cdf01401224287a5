"""External service clients."""

from .metrc_client import MetrcClient

__all__ = ["MetrcClient"]
