"""Package tools.

Single-package writes still send a one-element array body, which is the
shape METRC expects for every package mutation. The bulk variants map
each caller element onto the same body shape.
"""

from __future__ import annotations

from typing import Any, Dict, List

from .base import (
    LICENSE,
    LicenseListTool,
    PagedListTool,
    choose_identifier,
    license_params,
    require_items,
    require_object_items,
)
from .core import RemoteCallSpec, Tool, ToolParameter, drop_none, path_segment

PACKAGE_LABEL = ToolParameter("label", "string", "Package label")
ACTUAL_DATE = ToolParameter("actual_date", "string", "YYYY-MM-DD")


def _adjustment(entry: Dict[str, Any]) -> Dict[str, Any]:
    return drop_none(
        {
            "Label": entry.get("label"),
            "Quantity": entry.get("quantity"),
            "UnitOfMeasure": entry.get("unit_of_measure"),
            "AdjustmentReason": entry.get("adjustment_reason"),
            "AdjustmentDate": entry.get("adjustment_date"),
            "ReasonNote": entry.get("reason_note") or "",
        }
    )


class GetPackagesTool(LicenseListTool):
    name = "metrc_get_packages"
    description = "Get active packages for a facility license"
    path = "/packages/v2/active"


class GetPackagesWithPaginationTool(PagedListTool):
    name = "metrc_get_packages_with_pagination"
    description = "Get packages with optional page and pageSize"
    path = "/packages/v2/active"


class GetPackagesInactiveTool(PagedListTool):
    name = "metrc_get_packages_inactive"
    description = "Get inactive packages"
    path = "/packages/v2/inactive"


class GetPackageTool(Tool):
    name = "metrc_get_package"
    description = "Get a single package by ID or by label. The ID is used when both are given."
    parameters = (
        LICENSE,
        ToolParameter("package_id", "number", "Package Id (use id or label)", required=False),
        ToolParameter("package_label", "string", "Package label (use id or label)", required=False),
    )

    def build_request(self, args: Any) -> RemoteCallSpec:
        key = choose_identifier(self.name, "package_id", args.package_id, "package_label", args.package_label)
        return RemoteCallSpec(f"/packages/v2/{path_segment(key)}", params=license_params(args))


class CreatePackageTool(Tool):
    name = "metrc_create_package"
    description = "Create a new package. Requires item_id, tag, quantity, unit, location_id, and actual_date."
    parameters = (
        LICENSE,
        ToolParameter("tag", "string", "Package tag from metrc_get_tags_package_available"),
        ToolParameter("location_id", "number", "Location Id"),
        ToolParameter("item_id", "number", "Item Id"),
        ToolParameter("quantity", "number", "Package quantity"),
        ToolParameter("unit_of_measure", "string", "Unit of measure"),
        ToolParameter("is_production_batch", "boolean", "Default false", required=False),
        ToolParameter("product_requires_remediation", "boolean", "Default false", required=False),
        ACTUAL_DATE,
        ToolParameter(
            "ingredients",
            "array",
            "For derived packages",
            required=False,
            items={"type": "object"},
        ),
    )

    def build_request(self, args: Any) -> RemoteCallSpec:
        package: Dict[str, Any] = {
            "Tag": args.tag,
            "LocationId": args.location_id,
            "ItemId": args.item_id,
            "Quantity": args.quantity,
            "UnitOfMeasure": args.unit_of_measure,
            "IsProductionBatch": bool(args.is_production_batch),
            "ProductRequiresRemediation": bool(args.product_requires_remediation),
            "ActualDate": args.actual_date,
        }
        if args.ingredients:
            package["Ingredients"] = args.ingredients
        return RemoteCallSpec("/packages/v2/", method="POST", params=license_params(args), body=[package])


class AdjustPackageTool(Tool):
    name = "metrc_adjust_package"
    description = "Adjust package quantity. Supply package label, quantity, unit, reason, and adjustment date."
    parameters = (
        LICENSE,
        PACKAGE_LABEL,
        ToolParameter("quantity", "number", "Adjustment quantity (negative to reduce)"),
        ToolParameter("unit_of_measure", "string", "Unit of measure"),
        ToolParameter("adjustment_reason", "string", "Adjustment reason"),
        ToolParameter("adjustment_date", "string", "YYYY-MM-DD"),
        ToolParameter("reason_note", "string", "Optional note", required=False),
    )

    def build_request(self, args: Any) -> RemoteCallSpec:
        entry = _adjustment(args.model_dump())
        return RemoteCallSpec("/packages/v2/adjust", method="POST", params=license_params(args), body=[entry])


class BulkAdjustPackagesTool(Tool):
    name = "metrc_bulk_adjust_packages"
    description = (
        "Adjust multiple packages in one call. Supply license_number and adjustments array (each: "
        "label, quantity, unit_of_measure, adjustment_reason, adjustment_date, optional reason_note)."
    )
    parameters = (
        LICENSE,
        ToolParameter(
            "adjustments",
            "array",
            "Package adjustments",
            items={
                "type": "object",
                "properties": {
                    "label": {"type": "string"},
                    "quantity": {"type": "number"},
                    "unit_of_measure": {"type": "string"},
                    "adjustment_reason": {"type": "string"},
                    "adjustment_date": {"type": "string"},
                    "reason_note": {"type": "string"},
                },
                "required": [
                    "label",
                    "quantity",
                    "unit_of_measure",
                    "adjustment_reason",
                    "adjustment_date",
                ],
            },
        ),
    )

    def build_request(self, args: Any) -> RemoteCallSpec:
        adjustments = require_object_items(self.name, "adjustments", args.adjustments)
        body = [_adjustment(entry) for entry in adjustments]
        return RemoteCallSpec("/packages/v2/adjust", method="POST", params=license_params(args), body=body)


class ChangePackageLocationTool(Tool):
    name = "metrc_change_package_location"
    description = "Change package location. Supply package label and new location_id."
    parameters = (LICENSE, PACKAGE_LABEL, ToolParameter("location_id", "number", "New location Id"))

    def build_request(self, args: Any) -> RemoteCallSpec:
        return RemoteCallSpec(
            "/packages/v2/location",
            method="PUT",
            params=license_params(args),
            body=[{"Label": args.label, "LocationId": args.location_id}],
        )


class BulkChangePackageLocationTool(Tool):
    name = "metrc_bulk_change_package_location"
    description = (
        "Change location for multiple packages in one call. Supply license_number and moves array "
        "(each: label, location_id)."
    )
    parameters = (
        LICENSE,
        ToolParameter(
            "moves",
            "array",
            "Package moves",
            items={
                "type": "object",
                "properties": {"label": {"type": "string"}, "location_id": {"type": "number"}},
                "required": ["label", "location_id"],
            },
        ),
    )

    def build_request(self, args: Any) -> RemoteCallSpec:
        moves = require_object_items(self.name, "moves", args.moves)
        body = [{"Label": move.get("label"), "LocationId": move.get("location_id")} for move in moves]
        return RemoteCallSpec("/packages/v2/location", method="PUT", params=license_params(args), body=body)


class FinishPackageTool(Tool):
    name = "metrc_finish_package"
    description = "Finish a package (make it available for sale). Supply label and actual_date."
    parameters = (LICENSE, PACKAGE_LABEL, ACTUAL_DATE)
    path = "/packages/v2/finish"

    def build_request(self, args: Any) -> RemoteCallSpec:
        return RemoteCallSpec(
            self.path,
            method="PUT",
            params=license_params(args),
            body=[{"Label": args.label, "ActualDate": args.actual_date}],
        )


class UnfinishPackageTool(FinishPackageTool):
    name = "metrc_unfinish_package"
    description = "Unfinish a package. Supply label and actual_date."
    path = "/packages/v2/unfinish"


class BulkFinishPackagesTool(Tool):
    name = "metrc_bulk_finish_packages"
    description = "Finish multiple packages in one call. Supply license_number, actual_date, and labels array."
    parameters = (
        LICENSE,
        ACTUAL_DATE,
        ToolParameter("labels", "array", "Package labels to finish", items={"type": "string"}),
    )

    def build_request(self, args: Any) -> RemoteCallSpec:
        labels = require_items(self.name, "labels", args.labels)
        body: List[Dict[str, Any]] = [{"Label": label, "ActualDate": args.actual_date} for label in labels]
        return RemoteCallSpec("/packages/v2/finish", method="PUT", params=license_params(args), body=body)


class RemediatePackageTool(Tool):
    name = "metrc_remediate_package"
    description = (
        "Remediate a package that failed lab testing. Supply the package label, remediation "
        "method, and date."
    )
    parameters = (
        LICENSE,
        ToolParameter("package_label", "string", "Package label to remediate"),
        ToolParameter("remediation_method", "string", "Remediation method description"),
        ToolParameter("remediation_date", "string", "Remediation date YYYY-MM-DD"),
    )

    def build_request(self, args: Any) -> RemoteCallSpec:
        return RemoteCallSpec(
            "/packages/v2/remediate",
            method="POST",
            params=license_params(args),
            body=[
                {
                    "Label": args.package_label,
                    "RemediationMethodName": args.remediation_method,
                    "RemediationDate": args.remediation_date,
                }
            ],
        )
