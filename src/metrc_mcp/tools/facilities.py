"""Facility, location, tag and reference-data tools.

Most of these are plain lookups. Reference lists (units, waste methods,
facilities) need no license; the rest are scoped to one facility.
"""

from __future__ import annotations

from typing import Any

from .base import LICENSE, LicenseListTool, ReferenceListTool, license_params
from .core import RemoteCallSpec, Tool, ToolParameter


class GetFacilitiesTool(ReferenceListTool):
    name = "metrc_get_facilities"
    description = "List all facilities and their license numbers for the authenticated account"
    path = "/facilities/v2/"


class GetUnitsOfMeasureTool(ReferenceListTool):
    name = "metrc_get_units_of_measure"
    description = "Get active units of measure (no license required)"
    path = "/unitsofmeasure/v2/active"


class GetWasteMethodsTool(ReferenceListTool):
    name = "metrc_get_waste_methods"
    description = "Get waste methods (no license required)"
    path = "/wastemethods/v2/"


class GetEmployeesTool(LicenseListTool):
    name = "metrc_get_employees"
    description = "Get employees for a facility license"
    path = "/employees/v2/"


class GetLocationsTool(LicenseListTool):
    name = "metrc_get_locations"
    description = "Get active locations for a facility license"
    path = "/locations/v2/active"


class GetLocationTypesTool(LicenseListTool):
    name = "metrc_get_location_types"
    description = "Get location types for a facility (need one that allows plants to create plantings)"
    path = "/locations/v2/types"


class CreateLocationTool(Tool):
    name = "metrc_create_location"
    description = "Create a location. Use a LocationTypeId that allows plants (ForPlants: true)."
    parameters = (
        LICENSE,
        ToolParameter("name", "string", "Location name"),
        ToolParameter("location_type_id", "number", "LocationTypeId from metrc_get_location_types"),
    )

    def build_request(self, args: Any) -> RemoteCallSpec:
        return RemoteCallSpec(
            "/locations/v2/",
            method="POST",
            params=license_params(args),
            body=[{"Name": args.name, "LocationTypeId": args.location_type_id}],
        )


class GetPlantTagsAvailableTool(LicenseListTool):
    name = "metrc_get_tags_plant_available"
    description = "Get available plant tags for the facility (needed to create plantings)"
    path = "/tags/v2/plant/available"


class GetPackageTagsAvailableTool(LicenseListTool):
    name = "metrc_get_tags_package_available"
    description = "Get available package tags"
    path = "/tags/v2/package/available"


class GetProcessingActiveTool(LicenseListTool):
    name = "metrc_get_processing_active"
    description = "Get active processing jobs"
    path = "/processing/v2/active"


class GetProcessingJobTypesTool(LicenseListTool):
    name = "metrc_get_processing_job_types"
    description = "Get processing job types"
    path = "/processing/v2/jobtypes/active"


class SandboxSetupTool(Tool):
    name = "metrc_sandbox_setup"
    description = "Run sandbox integrator setup to seed test data (sandbox only)"

    def build_request(self, args: Any) -> RemoteCallSpec:
        return RemoteCallSpec("/sandbox/v2/integrator/setup", method="POST", body={})
