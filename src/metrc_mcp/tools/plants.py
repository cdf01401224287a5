"""Plant and plant batch tools.

Covers the cultivation flow: plantings create untracked batch plants,
the batch growth phase change converts them into tracked plants, the
plant growth phase change moves them to flowering, and harvesting
flowering plants creates a harvest.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List

from ..errors import AmbiguousIdentifierError, InvalidToolInputError
from .base import LICENSE, LicenseListTool, PagedListTool, choose_identifier, license_params
from .core import RemoteCallSpec, Tool, ToolParameter, path_segment

logger = logging.getLogger(__name__)

DEFAULT_HARVEST_WEIGHT = 1
DEFAULT_HARVEST_UNIT = "Ounces"


class GetPlantsFloweringTool(LicenseListTool):
    name = "metrc_get_plants_flowering"
    description = "Get flowering plants for a facility (required before creating a harvest)"
    path = "/plants/v2/flowering"


class GetPlantsVegetativeTool(LicenseListTool):
    name = "metrc_get_plants_vegetative"
    description = "Get vegetative plants for a facility (can be moved to flowering)"
    path = "/plants/v2/vegetative"


class GetPlantBatchesTool(LicenseListTool):
    name = "metrc_get_plant_batches"
    description = "Get active plant batches for a facility license"
    path = "/plantbatches/v2/active"


class GetPlantBatchTypesTool(LicenseListTool):
    name = "metrc_get_plant_batch_types"
    description = "Get plant batch types (e.g. Seed, Clone) for the facility"
    path = "/plantbatches/v2/types"


class GetPlantBatchesInactiveTool(PagedListTool):
    name = "metrc_get_plant_batches_inactive"
    description = "Get inactive plant batches"
    path = "/plantbatches/v2/inactive"


class GetPlantTool(Tool):
    name = "metrc_get_plant"
    description = "Get a single plant by ID or by label. The ID is used when both are given."
    parameters = (
        LICENSE,
        ToolParameter("plant_id", "number", "Plant Id", required=False),
        ToolParameter("plant_label", "string", "Plant label", required=False),
    )

    def build_request(self, args: Any) -> RemoteCallSpec:
        key = choose_identifier(self.name, "plant_id", args.plant_id, "plant_label", args.plant_label)
        return RemoteCallSpec(f"/plants/v2/{path_segment(key)}", params=license_params(args))


class CreatePlantBatchPlantingsTool(Tool):
    name = "metrc_create_plant_batch_plantings"
    description = (
        "Create a plant batch and plantings (individual plants). Requires strain_id or "
        "strain_name, location_id, type (e.g. Clone), count, planting_date (YYYY-MM-DD), and "
        "plant tag labels from metrc_get_tags_plant_available."
    )
    parameters = (
        LICENSE,
        ToolParameter("plant_batch_name", "string", "Name for the plant batch"),
        ToolParameter("strain_id", "number", "Strain Id from metrc_get_strains", required=False),
        ToolParameter(
            "strain_name",
            "string",
            "Strain name (e.g. SBX Strain 1). Used when strain_id is not given.",
            required=False,
        ),
        ToolParameter("location_id", "number", "Location Id (must allow plants)"),
        ToolParameter("type", "string", "Plant batch type, e.g. Clone or Seed"),
        ToolParameter("count", "number", "Number of plants to create"),
        ToolParameter("planting_date", "string", "Planting date YYYY-MM-DD"),
        ToolParameter(
            "plant_labels",
            "array",
            "Array of plant tag labels from metrc_get_tags_plant_available (one per plant)",
            items={"type": "string"},
        ),
    )

    def prepare_args(self, args: Dict[str, Any]) -> Dict[str, Any]:
        labels = args.get("plant_labels")
        if not isinstance(labels, str):
            return args
        # Models sometimes send the label list as a JSON-encoded string.
        try:
            decoded = json.loads(labels)
        except json.JSONDecodeError:
            return args
        if not isinstance(decoded, list):
            return args
        return {**args, "plant_labels": decoded}

    def build_request(self, args: Any) -> RemoteCallSpec:
        batch_name = args.plant_batch_name.strip()
        if not batch_name:
            raise InvalidToolInputError(self.name, ["plant_batch_name: must not be blank"])
        strain_key = choose_identifier(self.name, "strain_id", args.strain_id, "strain_name", args.strain_name)
        strain_field = "StrainId" if args.strain_id is not None else "Strain"
        body: List[Dict[str, Any]] = []
        for label in args.plant_labels:
            body.append(
                {
                    "PlantBatchName": batch_name,
                    "Type": args.type,
                    "Count": 1,
                    "LocationId": args.location_id,
                    "ActualDate": args.planting_date,
                    "PlantLabel": label,
                    strain_field: strain_key,
                }
            )
        return RemoteCallSpec(
            "/plantbatches/v2/plantings",
            method="POST",
            params=license_params(args),
            body=body,
        )


class ChangePlantsGrowthPhaseTool(Tool):
    name = "metrc_change_plants_growth_phase"
    description = (
        "Change individual plant growth phase (e.g. Vegetative to Flowering). Supply plant_ids "
        "and/or plant_labels, growth_phase, change_date, and optional new_location."
    )
    parameters = (
        LICENSE,
        ToolParameter("growth_phase", "string", "New phase: Vegetative or Flowering"),
        ToolParameter("change_date", "string", "Date of change YYYY-MM-DD"),
        ToolParameter("plant_ids", "array", "Plant Ids to change", required=False, items={"type": "number"}),
        ToolParameter(
            "plant_labels", "array", "Plant Labels to change", required=False, items={"type": "string"}
        ),
        ToolParameter(
            "new_location", "string", "New location name (required by Colorado v2)", required=False
        ),
    )

    def build_request(self, args: Any) -> RemoteCallSpec:
        entry: Dict[str, Any] = {"GrowthPhase": args.growth_phase, "GrowthDate": args.change_date}
        if args.new_location:
            entry["NewLocation"] = args.new_location
        body = [{"Id": plant_id, **entry} for plant_id in args.plant_ids or []]
        body.extend({"Label": label, **entry} for label in args.plant_labels or [])
        if not body:
            raise AmbiguousIdentifierError("plant_ids", "plant_labels")
        return RemoteCallSpec(
            "/plants/v2/growthphase",
            method="PUT",
            params=license_params(args),
            body=body,
        )


class ChangePlantBatchGrowthPhaseTool(Tool):
    name = "metrc_change_plant_batch_growth_phase"
    description = (
        "Convert untracked plant batch plants into tracked individual plants by changing the "
        "batch growth phase. Required step after plantings in Colorado v2: batch plants start "
        "untracked and must be converted to Vegetative via this call before they appear in "
        "plants/vegetative."
    )
    parameters = (
        LICENSE,
        ToolParameter("plant_batch_name", "string", "Plant batch name from plantings"),
        ToolParameter("count", "number", "Number of plants to convert"),
        ToolParameter(
            "starting_tag", "string", "First plant tag for tracked plants (consumes one tag per plant)"
        ),
        ToolParameter("growth_phase", "string", "Target phase: Vegetative"),
        ToolParameter("growth_date", "string", "Date YYYY-MM-DD"),
        ToolParameter("new_location", "string", "Location name for the plants"),
    )

    def build_request(self, args: Any) -> RemoteCallSpec:
        return RemoteCallSpec(
            "/plantbatches/v2/growthphase",
            method="POST",
            params=license_params(args),
            body=[
                {
                    "Name": args.plant_batch_name,
                    "Count": args.count,
                    "StartingTag": args.starting_tag,
                    "GrowthPhase": args.growth_phase,
                    "GrowthDate": args.growth_date,
                    "NewLocation": args.new_location,
                }
            ],
        )


class HarvestPlantsTool(Tool):
    name = "metrc_harvest_plants"
    description = (
        "Create a harvest by harvesting flowering plants. Supply harvest name, harvest date "
        "(YYYY-MM-DD), and plant IDs from metrc_get_plants_flowering. Colorado also requires "
        "weight, unit, and drying location per plant."
    )
    parameters = (
        LICENSE,
        ToolParameter("harvest_name", "string", "Name for the harvest"),
        ToolParameter("harvest_date", "string", "Harvest date (YYYY-MM-DD)"),
        ToolParameter(
            "plant_ids",
            "array",
            "Array of plant Id values from flowering plants",
            items={"type": "number"},
        ),
        ToolParameter(
            "plant_labels",
            "array",
            "Array of plant Label values from flowering plants (required for Colorado). "
            "Get from metrc_get_plants_flowering.",
            required=False,
            items={"type": "string"},
        ),
        ToolParameter("weight_per_plant", "number", "Weight per plant (e.g. 1). Default 1.", required=False),
        ToolParameter(
            "unit_of_measure", "string", "Unit of measure (e.g. Ounces). Default Ounces.", required=False
        ),
        ToolParameter(
            "drying_location_id",
            "number",
            "Location Id for drying. Get from metrc_get_locations.",
            required=False,
        ),
    )

    def build_request(self, args: Any) -> RemoteCallSpec:
        labels = args.plant_labels or []
        weight = args.weight_per_plant if args.weight_per_plant is not None else DEFAULT_HARVEST_WEIGHT
        unit = args.unit_of_measure if args.unit_of_measure is not None else DEFAULT_HARVEST_UNIT
        if labels and len(labels) != len(args.plant_ids):
            logger.warning(
                "%s: %d plant ids but %d labels; labels are paired by position",
                self.name,
                len(args.plant_ids),
                len(labels),
            )
        body: List[Dict[str, Any]] = []
        for index, plant_id in enumerate(args.plant_ids):
            entry: Dict[str, Any] = {
                "HarvestName": args.harvest_name,
                "HarvestDate": args.harvest_date,
                "Id": plant_id,
                "Weight": weight,
                "UnitOfMeasure": unit,
                "ActualDate": args.harvest_date,
            }
            if index < len(labels):
                entry["Label"] = labels[index]
            if args.drying_location_id is not None:
                entry["DryingLocationId"] = args.drying_location_id
            body.append(entry)
        return RemoteCallSpec(
            "/plants/v2/harvest",
            method="PUT",
            params=license_params(args),
            body=body,
        )
