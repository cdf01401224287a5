"""Item (product) and strain tools."""

from __future__ import annotations

from typing import Any, Dict, Tuple

from .base import LICENSE, LicenseListTool, license_params
from .core import RemoteCallSpec, Tool, ToolParameter, drop_none

STRAIN_FIELDS: Tuple[Tuple[str, str], ...] = (
    ("name", "Name"),
    ("testing_status", "TestingStatus"),
    ("thc_level", "ThcLevel"),
    ("cbd_level", "CbdLevel"),
    ("indica_percentage", "IndicaPercentage"),
    ("sativa_percentage", "SativaPercentage"),
    ("genetics", "Genetics"),
)

ITEM_FIELDS: Tuple[Tuple[str, str], ...] = (
    ("name", "Name"),
    ("item_category", "ItemCategory"),
    ("unit_of_measure", "UnitOfMeasure"),
    ("strain_id", "StrainId"),
    ("item_brand", "ItemBrand"),
    ("administration_method", "AdministrationMethod"),
    ("unit_cbd_percent", "UnitCbdPercent"),
    ("unit_cbd_content", "UnitCbdContent"),
    ("unit_cbd_content_unit", "UnitCbdContentUnit"),
    ("unit_thc_percent", "UnitThcPercent"),
    ("unit_thc_content", "UnitThcContent"),
    ("unit_thc_content_unit", "UnitThcContentUnit"),
)


def _rename(args: Any, fields: Tuple[Tuple[str, str], ...]) -> Dict[str, Any]:
    return {metrc_name: getattr(args, arg_name) for arg_name, metrc_name in fields}


class GetItemsTool(LicenseListTool):
    name = "metrc_get_items"
    description = "Get active items (products) for a facility license"
    path = "/items/v2/active"


class GetItemCategoriesTool(Tool):
    name = "metrc_get_item_categories"
    description = (
        "Get available item categories (e.g. Buds, Concentrate, Edible). Useful when creating items."
    )
    parameters = (
        ToolParameter(
            "license_number",
            "string",
            "Facility license number (optional for some states)",
            required=False,
        ),
    )

    def build_request(self, args: Any) -> RemoteCallSpec:
        params = license_params(args) if args.license_number else {}
        return RemoteCallSpec("/items/v1/categories", params=params)


class CreateItemTool(Tool):
    name = "metrc_create_item"
    description = "Create a new item (product). Supply name, category, unit of measure, etc."
    parameters = (
        LICENSE,
        ToolParameter("name", "string", "Item name"),
        ToolParameter("item_category", "string", "Category from metrc_get_item_categories"),
        ToolParameter("unit_of_measure", "string", "Unit of measure"),
        ToolParameter("strain_id", "number", "Strain Id", required=False),
        ToolParameter("item_brand", "string", "Brand name", required=False),
        ToolParameter("administration_method", "string", "Administration method", required=False),
        ToolParameter("unit_cbd_percent", "number", "CBD percent per unit", required=False),
        ToolParameter("unit_cbd_content", "number", "CBD content per unit", required=False),
        ToolParameter("unit_cbd_content_unit", "string", "Unit for the CBD content", required=False),
        ToolParameter("unit_thc_percent", "number", "THC percent per unit", required=False),
        ToolParameter("unit_thc_content", "number", "THC content per unit", required=False),
        ToolParameter("unit_thc_content_unit", "string", "Unit for the THC content", required=False),
    )

    def build_request(self, args: Any) -> RemoteCallSpec:
        item = drop_none(_rename(args, ITEM_FIELDS))
        return RemoteCallSpec("/items/v2/", method="POST", params=license_params(args), body=[item])


class UpdateItemTool(Tool):
    name = "metrc_update_item"
    description = "Update an existing item. Supply id and fields to update."
    parameters = (
        LICENSE,
        ToolParameter("id", "number", "Item Id"),
        ToolParameter("name", "string", "Item name", required=False),
        ToolParameter("item_category", "string", "Item category", required=False),
        ToolParameter("unit_of_measure", "string", "Unit of measure", required=False),
    )

    def build_request(self, args: Any) -> RemoteCallSpec:
        item = drop_none({"Id": args.id, **_rename(args, ITEM_FIELDS[:3])}, keep=("Id",))
        return RemoteCallSpec("/items/v2/", method="PUT", params=license_params(args), body=[item])


class GetStrainsTool(LicenseListTool):
    name = "metrc_get_strains"
    description = "Get active strains for a facility license"
    path = "/strains/v2/active"


_STRAIN_PARAMETERS = (
    ToolParameter("testing_status", "string", "Testing status, e.g. None or InHouse", required=False),
    ToolParameter("thc_level", "number", "THC level", required=False),
    ToolParameter("cbd_level", "number", "CBD level", required=False),
    ToolParameter("indica_percentage", "number", "Indica percentage", required=False),
    ToolParameter("sativa_percentage", "number", "Sativa percentage", required=False),
    ToolParameter("genetics", "string", "Genetics description", required=False),
)


class CreateStrainTool(Tool):
    name = "metrc_create_strain"
    description = "Create a new strain"
    parameters = (LICENSE, ToolParameter("name", "string", "Strain name"), *_STRAIN_PARAMETERS)

    def build_request(self, args: Any) -> RemoteCallSpec:
        strain = drop_none(_rename(args, STRAIN_FIELDS))
        return RemoteCallSpec("/strains/v2/", method="POST", params=license_params(args), body=[strain])


class UpdateStrainTool(Tool):
    name = "metrc_update_strain"
    description = "Update an existing strain"
    parameters = (
        LICENSE,
        ToolParameter("id", "number", "Strain Id"),
        ToolParameter("name", "string", "Strain name", required=False),
        *_STRAIN_PARAMETERS,
    )

    def build_request(self, args: Any) -> RemoteCallSpec:
        strain = drop_none({"Id": args.id, **_rename(args, STRAIN_FIELDS)}, keep=("Id",))
        return RemoteCallSpec("/strains/v2/", method="PUT", params=license_params(args), body=[strain])
