"""Harvest tools."""

from __future__ import annotations

from typing import Any, Dict

from .base import LICENSE, LicenseListTool, PagedListTool, license_params, require_object_items
from .core import RemoteCallSpec, Tool, ToolParameter, path_segment

HARVEST_ID = ToolParameter("harvest_id", "number", "Harvest Id from metrc_get_harvests")


class GetHarvestsTool(LicenseListTool):
    name = "metrc_get_harvests"
    description = "Get active harvests for a facility license"
    path = "/harvests/v2/active"


class GetHarvestsInactiveTool(PagedListTool):
    name = "metrc_get_harvests_inactive"
    description = "Get inactive harvests (with optional page)"
    path = "/harvests/v2/inactive"


class GetHarvestTool(Tool):
    name = "metrc_get_harvest"
    description = "Get a single harvest by ID"
    parameters = (LICENSE, HARVEST_ID)

    def build_request(self, args: Any) -> RemoteCallSpec:
        return RemoteCallSpec(f"/harvests/v2/{path_segment(args.harvest_id)}", params=license_params(args))


class _HarvestUpdateTool(Tool):
    """PUT a single-element harvest body built from ``fields``."""

    path: str
    # (argument name, METRC field name)
    fields: tuple = ()

    def build_request(self, args: Any) -> RemoteCallSpec:
        entry: Dict[str, Any] = {"Id": args.harvest_id}
        for arg_name, metrc_name in self.fields:
            entry[metrc_name] = getattr(args, arg_name)
        return RemoteCallSpec(self.path, method="PUT", params=license_params(args), body=[entry])


class MoveHarvestTool(_HarvestUpdateTool):
    name = "metrc_move_harvest"
    description = "Move harvest to a different location. Supply harvest_id and new location_id."
    path = "/harvests/v2/location"
    fields = (("location_id", "LocationId"),)
    parameters = (LICENSE, HARVEST_ID, ToolParameter("location_id", "number", "New location Id"))


class RenameHarvestTool(_HarvestUpdateTool):
    name = "metrc_rename_harvest"
    description = "Rename a harvest. Supply harvest_id and new name."
    path = "/harvests/v2/rename"
    fields = (("new_name", "NewName"),)
    parameters = (LICENSE, HARVEST_ID, ToolParameter("new_name", "string", "New harvest name"))


class FinishHarvestTool(_HarvestUpdateTool):
    name = "metrc_finish_harvest"
    description = "Finish a harvest. Supply harvest_id and actual_date."
    path = "/harvests/v2/finish"
    fields = (("actual_date", "ActualDate"),)
    parameters = (LICENSE, HARVEST_ID, ToolParameter("actual_date", "string", "YYYY-MM-DD"))


class UnfinishHarvestTool(_HarvestUpdateTool):
    name = "metrc_unfinish_harvest"
    description = "Unfinish a harvest. Supply harvest_id and actual_date."
    path = "/harvests/v2/unfinish"
    fields = (("actual_date", "ActualDate"),)
    parameters = (LICENSE, HARVEST_ID, ToolParameter("actual_date", "string", "YYYY-MM-DD"))


class CreateHarvestPackagesTool(Tool):
    name = "metrc_create_harvest_packages"
    description = (
        "Create packages from a harvest. Supply harvest_id and package definitions "
        "(item, quantity, unit, tag, etc.)."
    )
    parameters = (
        LICENSE,
        ToolParameter("harvest_id", "number", "Harvest Id", required=False),
        ToolParameter("harvest_name", "string", "Harvest name", required=False),
        ToolParameter(
            "packages",
            "array",
            "Package definitions in METRC field names",
            items={
                "type": "object",
                "properties": {
                    "Tag": {"type": "string"},
                    "LocationId": {"type": "number"},
                    "ItemId": {"type": "number"},
                    "Quantity": {"type": "number"},
                    "UnitOfMeasure": {"type": "string"},
                    "IsProductionBatch": {"type": "boolean"},
                    "ProductRequiresRemediation": {"type": "boolean"},
                    "ActualDate": {"type": "string"},
                },
            },
        ),
    )

    def build_request(self, args: Any) -> RemoteCallSpec:
        packages = require_object_items(self.name, "packages", args.packages)
        return RemoteCallSpec(
            "/harvests/v2/packages",
            method="POST",
            params=license_params(args),
            body=packages,
        )


class PostHarvestWasteTool(Tool):
    name = "metrc_post_harvest_waste"
    description = "Record waste on a harvest. Supply harvest_id, waste method, quantity, unit, and date."
    parameters = (
        LICENSE,
        HARVEST_ID,
        ToolParameter("harvest_name", "string", "Harvest name"),
        ToolParameter("waste_method_id", "number", "Waste method Id from metrc_get_waste_methods"),
        ToolParameter("waste_amount", "number", "Amount of waste"),
        ToolParameter("waste_unit_of_measure", "string", "Unit of measure for the waste amount"),
        ToolParameter("waste_date", "string", "YYYY-MM-DD"),
        ToolParameter("reason_note", "string", "Optional note", required=False),
    )

    def build_request(self, args: Any) -> RemoteCallSpec:
        return RemoteCallSpec(
            "/harvests/v2/waste",
            method="POST",
            params=license_params(args),
            body=[
                {
                    "HarvestId": args.harvest_id,
                    "HarvestName": args.harvest_name,
                    "WasteMethodId": args.waste_method_id,
                    "WasteAmount": args.waste_amount,
                    "WasteUnitOfMeasure": args.waste_unit_of_measure,
                    "WasteDate": args.waste_date,
                    "ReasonNote": args.reason_note or "",
                }
            ],
        )
