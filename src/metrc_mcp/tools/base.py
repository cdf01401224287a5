"""Shared tool shapes reused across the METRC domains."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

from ..errors import AmbiguousIdentifierError, InvalidToolInputError
from .core import RemoteCallSpec, Tool, ToolParameter

logger = logging.getLogger(__name__)

LICENSE = ToolParameter(
    "license_number",
    "string",
    "Facility license number (e.g. SF-SBX-CO-1-8002). Get from metrc_get_facilities.",
)
PAGE = ToolParameter("page", "number", "Page number (optional)", required=False)
PAGE_SIZE = ToolParameter("page_size", "number", "Page size (optional)", required=False)


def license_params(args: Any) -> Dict[str, Any]:
    return {"licenseNumber": args.license_number}


class ReferenceListTool(Tool):
    """GET a list that needs no license number."""

    path: str
    parameters = ()

    def build_request(self, args: Any) -> RemoteCallSpec:
        return RemoteCallSpec(self.path)


class LicenseListTool(Tool):
    """GET a list scoped to one facility license."""

    path: str
    parameters = (LICENSE,)

    def build_request(self, args: Any) -> RemoteCallSpec:
        return RemoteCallSpec(self.path, params=license_params(args))


class PagedListTool(Tool):
    """GET a paged list; page and pageSize are sent only when supplied."""

    path: str
    parameters = (LICENSE, PAGE, PAGE_SIZE)

    def build_request(self, args: Any) -> RemoteCallSpec:
        params = license_params(args)
        if args.page is not None:
            params["page"] = args.page
        if args.page_size is not None:
            params["pageSize"] = args.page_size
        return RemoteCallSpec(self.path, params=params)


def choose_identifier(
    tool_name: str,
    id_field: str,
    id_value: Any,
    label_field: str,
    label_value: Any,
) -> Any:
    """Pick the lookup key for an id-or-label operation.

    The numeric id wins when both are given. Neither raises
    AmbiguousIdentifierError before any request is built.
    """
    if id_value is not None:
        if label_value is not None:
            logger.warning(
                "%s received both %s and %s; using %s",
                tool_name,
                id_field,
                label_field,
                id_field,
            )
        return id_value
    if label_value is not None:
        return label_value
    raise AmbiguousIdentifierError(id_field, label_field)


def require_items(tool_name: str, field: str, values: Optional[Sequence[Any]]) -> List[Any]:
    if not values:
        raise InvalidToolInputError(tool_name, [f"{field}: expected a non-empty array"])
    return list(values)


def require_object_items(tool_name: str, field: str, values: Optional[Sequence[Any]]) -> List[Dict[str, Any]]:
    items = require_items(tool_name, field, values)
    for index, item in enumerate(items):
        if not isinstance(item, dict):
            raise InvalidToolInputError(tool_name, [f"{field}[{index}]: expected object"])
    return items
