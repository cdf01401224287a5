"""Sales tools. These need a dispensary or microbusiness license."""

from __future__ import annotations

from typing import Any, Dict

from .base import LICENSE, LicenseListTool, PagedListTool, license_params, require_object_items
from .core import RemoteCallSpec, Tool, ToolParameter


class GetSalesReceiptsTool(PagedListTool):
    name = "metrc_get_sales_receipts"
    description = (
        "Get active sales receipts for a facility. Requires a dispensary or microbusiness license."
    )
    path = "/sales/v2/receipts/active"


class GetSalesCustomerTypesTool(LicenseListTool):
    name = "metrc_get_sales_customer_types"
    description = (
        "Get available sales customer types (e.g. Consumer, Patient). Requires a dispensary or "
        "microbusiness license."
    )
    path = "/sales/v2/customertypes"


class CreateSalesReceiptTool(Tool):
    name = "metrc_create_sales_receipt"
    description = (
        "Create a sales receipt with line-item transactions. Requires a dispensary or "
        "microbusiness license. Each transaction references a package label, quantity, unit, "
        "and total amount."
    )
    parameters = (
        LICENSE,
        ToolParameter("receipt_date", "string", "Sale date YYYY-MM-DD"),
        ToolParameter(
            "sales_customer_type",
            "string",
            "Customer type from metrc_get_sales_customer_types (e.g. Consumer, Patient)",
        ),
        ToolParameter(
            "patient_license_number",
            "string",
            "Patient license (required if customer type is Patient)",
            required=False,
        ),
        ToolParameter("caregiver_license_number", "string", "Caregiver license (optional)", required=False),
        ToolParameter(
            "transactions",
            "array",
            "Array of transaction line items",
            items={
                "type": "object",
                "properties": {
                    "PackageLabel": {"type": "string", "description": "Package label being sold"},
                    "Quantity": {"type": "number", "description": "Quantity sold"},
                    "UnitOfMeasure": {"type": "string", "description": "Unit of measure"},
                    "TotalAmount": {"type": "number", "description": "Total sale amount in dollars"},
                },
                "required": ["PackageLabel", "Quantity", "UnitOfMeasure", "TotalAmount"],
            },
        ),
    )

    def build_request(self, args: Any) -> RemoteCallSpec:
        transactions = require_object_items(self.name, "transactions", args.transactions)
        receipt: Dict[str, Any] = {
            "SalesDate": args.receipt_date,
            "SalesCustomerType": args.sales_customer_type,
            "Transactions": transactions,
        }
        if args.patient_license_number:
            receipt["PatientLicenseNumber"] = args.patient_license_number
        if args.caregiver_license_number:
            receipt["CaregiverLicenseNumber"] = args.caregiver_license_number
        return RemoteCallSpec("/sales/v2/receipts", method="POST", params=license_params(args), body=[receipt])
