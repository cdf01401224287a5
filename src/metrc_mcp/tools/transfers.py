"""Transfer tools."""

from __future__ import annotations

from typing import Any, Dict

from .base import LICENSE, LicenseListTool, license_params, require_object_items
from .core import RemoteCallSpec, Tool, ToolParameter, path_segment


class GetTransfersIncomingTool(LicenseListTool):
    name = "metrc_get_transfers_incoming"
    description = "List incoming transfers"
    path = "/transfers/v2/incoming"


class GetTransfersOutgoingTool(LicenseListTool):
    name = "metrc_get_transfers_outgoing"
    description = "List outgoing transfers"
    path = "/transfers/v2/outgoing"


class GetTransferTypesTool(LicenseListTool):
    name = "metrc_get_transfer_types"
    description = "Get available transfer types for a facility license"
    path = "/transfers/v2/types"


class GetTransferDeliveriesTool(Tool):
    name = "metrc_get_transfer_deliveries"
    description = "Get deliveries for a specific transfer by transfer ID"
    parameters = (LICENSE, ToolParameter("transfer_id", "number", "Transfer ID"))

    def build_request(self, args: Any) -> RemoteCallSpec:
        return RemoteCallSpec(
            f"/transfers/v2/{path_segment(args.transfer_id)}/deliveries",
            params=license_params(args),
        )


class GetTransferPackagesTool(Tool):
    name = "metrc_get_transfer_packages"
    description = "Get packages within a specific delivery of a transfer"
    parameters = (
        LICENSE,
        ToolParameter("delivery_id", "number", "Delivery ID from metrc_get_transfer_deliveries"),
    )

    def build_request(self, args: Any) -> RemoteCallSpec:
        return RemoteCallSpec(
            f"/transfers/v2/deliveries/{path_segment(args.delivery_id)}/packages",
            params=license_params(args),
        )


class CreateTransferTool(Tool):
    name = "metrc_create_transfer"
    description = (
        "Create an external incoming transfer between facilities. Supply shipper, transporter, "
        "destination, packages, and dates."
    )
    parameters = (
        ToolParameter("license_number", "string", "Facility license number (destination)"),
        ToolParameter("shipper_license_number", "string", "Shipper facility license number"),
        ToolParameter(
            "transporter_license_number",
            "string",
            "Transporter facility license number (can be same as shipper)",
            required=False,
        ),
        ToolParameter("transfer_type_name", "string", "Transfer type from metrc_get_transfer_types"),
        ToolParameter("estimated_departure_date", "string", "Estimated departure YYYY-MM-DD"),
        ToolParameter("estimated_arrival_date", "string", "Estimated arrival YYYY-MM-DD"),
        ToolParameter(
            "packages",
            "array",
            "Packages to transfer",
            items={
                "type": "object",
                "properties": {
                    "PackageLabel": {"type": "string"},
                    "WholesalePrice": {"type": "number"},
                },
                "required": ["PackageLabel"],
            },
        ),
    )

    def build_request(self, args: Any) -> RemoteCallSpec:
        packages = require_object_items(self.name, "packages", args.packages)
        transfer: Dict[str, Any] = {
            "ShipperLicenseNumber": args.shipper_license_number,
            "TransferTypeName": args.transfer_type_name,
            "EstimatedDepartureDateTime": args.estimated_departure_date,
            "EstimatedArrivalDateTime": args.estimated_arrival_date,
            "Packages": packages,
        }
        if args.transporter_license_number:
            transfer["Transporters"] = [
                {
                    "TransporterLicenseNumber": args.transporter_license_number,
                    "EstimatedDepartureDateTime": args.estimated_departure_date,
                    "EstimatedArrivalDateTime": args.estimated_arrival_date,
                }
            ]
        return RemoteCallSpec(
            "/transfers/v2/external/incoming",
            method="POST",
            params=license_params(args),
            body=[transfer],
        )
