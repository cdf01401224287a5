"""METRC REST client.

``MetrcClient`` is the default transport for the tool dispatcher: it is
callable as ``client(path, params, method=..., body=...)`` and returns the
decoded JSON response, or the raw text when the body is not JSON.

Usage:
    client = MetrcClient.from_settings(Settings.from_env())
    facilities = client("/facilities/v2/", {})
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional

import requests

from ..config import DEFAULT_METRC_API_URL, Settings
from ..errors import MetrcConfigError, TransportError

logger = logging.getLogger("metrc_mcp.metrc")

# Request timeout in seconds
REQUEST_TIMEOUT = 30


def _query_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


class MetrcClient:
    """Client for the METRC REST API using HTTP Basic auth."""

    def __init__(
        self,
        vendor_api_key: str,
        user_api_key: str,
        *,
        base_url: str = DEFAULT_METRC_API_URL,
        timeout: float = REQUEST_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        """Initialize the METRC client.

        Args:
            vendor_api_key: Software vendor API key
            user_api_key: Facility user API key
            base_url: API root, e.g. the Colorado sandbox
            timeout: Per-request timeout in seconds
            session: Optional preconfigured session
        """
        self.vendor_api_key = vendor_api_key
        self.user_api_key = user_api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = session or requests.Session()
        self._session.headers.update({"Accept": "application/json"})

    @classmethod
    def from_settings(cls, settings: Settings) -> "MetrcClient":
        return cls(
            settings.metrc_vendor_api_key,
            settings.metrc_user_api_key,
            base_url=settings.metrc_api_url,
            timeout=settings.metrc_timeout,
        )

    def __call__(
        self,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        *,
        method: str = "GET",
        body: Any = None,
    ) -> Any:
        return self.request(method, path, params=params, body=body)

    def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        body: Any = None,
    ) -> Any:
        """Make a request to the METRC API.

        Args:
            method: HTTP method (GET, POST, PUT)
            path: API path (e.g. "/packages/v2/active")
            params: Query parameters; None values are dropped
            body: JSON body; omitted entirely when None

        Returns:
            Decoded JSON, or the response text when it is not JSON

        Raises:
            MetrcConfigError: If credentials are missing
            TransportError: If the request fails or METRC rejects it
        """
        if not self.vendor_api_key or not self.user_api_key:
            raise MetrcConfigError(
                "METRC credentials required. Set METRC_VENDOR_API_KEY and "
                "METRC_USER_API_KEY in environment."
            )

        url = f"{self.base_url}{path}"
        query = {key: _query_value(value) for key, value in (params or {}).items() if value is not None}
        kwargs: Dict[str, Any] = {
            "params": query,
            "auth": (self.vendor_api_key, self.user_api_key),
            "timeout": self.timeout,
        }
        if body is not None:
            kwargs["json"] = body

        logger.info("METRC %s %s params=%s", method, path, sorted(query))
        try:
            response = self._session.request(method, url, **kwargs)
        except requests.exceptions.Timeout:
            raise TransportError("Request to METRC API timed out")
        except requests.exceptions.ConnectionError:
            raise TransportError("Could not connect to METRC API")
        except requests.exceptions.RequestException as e:
            raise TransportError(f"METRC API request failed: {e}")

        text = response.text
        if not response.ok:
            logger.warning("METRC %s %s failed status=%s", method, path, response.status_code)
            raise TransportError(text or f"HTTP {response.status_code}", status_code=response.status_code)
        if not text:
            return ""
        try:
            return json.loads(text)
        except ValueError:
            return text
