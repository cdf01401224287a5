"""Tests for how each METRC tool maps its arguments onto a request."""

import logging

import pytest

from conftest import LICENSE_NUMBER
from metrc_mcp.errors import AmbiguousIdentifierError, InvalidToolInputError

LIC = {"license_number": LICENSE_NUMBER}
LIC_PARAMS = {"licenseNumber": LICENSE_NUMBER}


def run(dispatcher, transport, tool_name, **args):
    dispatcher.execute(tool_name, {**LIC, **args})
    return transport.last


# -----------------------------------------------------------------------------
# Reference and list lookups
# -----------------------------------------------------------------------------

class TestLookups:
    @pytest.mark.parametrize(
        "name,path",
        [
            ("metrc_get_facilities", "/facilities/v2/"),
            ("metrc_get_units_of_measure", "/unitsofmeasure/v2/active"),
            ("metrc_get_waste_methods", "/wastemethods/v2/"),
        ],
    )
    def test_reference_lists_send_no_license(self, dispatcher, transport, name, path):
        dispatcher.execute(name, {})
        assert transport.last == {"path": path, "params": {}, "method": "GET", "body": None}

    @pytest.mark.parametrize(
        "name,path",
        [
            ("metrc_get_locations", "/locations/v2/active"),
            ("metrc_get_tags_plant_available", "/tags/v2/plant/available"),
            ("metrc_get_plants_flowering", "/plants/v2/flowering"),
            ("metrc_get_harvests", "/harvests/v2/active"),
            ("metrc_get_strains", "/strains/v2/active"),
            ("metrc_get_transfers_incoming", "/transfers/v2/incoming"),
            ("metrc_get_lab_test_types", "/labtests/v2/types"),
            ("metrc_get_sales_customer_types", "/sales/v2/customertypes"),
        ],
    )
    def test_license_lists(self, dispatcher, transport, name, path):
        call = run(dispatcher, transport, name)
        assert call["path"] == path
        assert call["params"] == LIC_PARAMS

    def test_paging_sent_only_when_given(self, dispatcher, transport):
        """page and pageSize are omitted unless supplied"""
        call = run(dispatcher, transport, "metrc_get_packages_with_pagination")
        assert call["params"] == LIC_PARAMS

        call = run(dispatcher, transport, "metrc_get_packages_with_pagination", page=2, page_size=50)
        assert call["path"] == "/packages/v2/active"
        assert call["params"] == {**LIC_PARAMS, "page": 2, "pageSize": 50}

    def test_item_categories_license_is_optional(self, dispatcher, transport):
        dispatcher.execute("metrc_get_item_categories", {})
        assert transport.last["path"] == "/items/v1/categories"
        assert transport.last["params"] == {}

        run(dispatcher, transport, "metrc_get_item_categories")
        assert transport.last["params"] == LIC_PARAMS

    def test_lab_test_filters(self, dispatcher, transport):
        call = run(dispatcher, transport, "metrc_get_lab_test_results", package_id=9)
        assert call["path"] == "/labtests/v2/results"
        assert call["params"] == {**LIC_PARAMS, "packageId": 9}

        call = run(dispatcher, transport, "metrc_get_lab_test_batches", harvest_id=3)
        assert call["params"] == {**LIC_PARAMS, "harvestId": 3}

    def test_transfer_paths_embed_ids(self, dispatcher, transport):
        assert run(dispatcher, transport, "metrc_get_transfer_deliveries", transfer_id=11)["path"] == (
            "/transfers/v2/11/deliveries"
        )
        assert run(dispatcher, transport, "metrc_get_transfer_packages", delivery_id=12.0)["path"] == (
            "/transfers/v2/deliveries/12/packages"
        )

    def test_sandbox_setup_posts_empty_object(self, dispatcher, transport):
        dispatcher.execute("metrc_sandbox_setup", {})
        assert transport.last == {
            "path": "/sandbox/v2/integrator/setup",
            "params": {},
            "method": "POST",
            "body": {},
        }


# -----------------------------------------------------------------------------
# Id-or-label lookups
# -----------------------------------------------------------------------------

class TestIdentifierChoice:
    def test_package_by_id(self, dispatcher, transport):
        assert run(dispatcher, transport, "metrc_get_package", package_id=5)["path"] == "/packages/v2/5"

    def test_package_by_label_is_escaped(self, dispatcher, transport):
        call = run(dispatcher, transport, "metrc_get_package", package_label="1A4 FF/01")
        assert call["path"] == "/packages/v2/1A4%20FF%2F01"

    def test_id_wins_over_label(self, dispatcher, transport, caplog):
        """Both given: the id is used and a warning is logged"""
        with caplog.at_level(logging.WARNING, logger="metrc_mcp.tools.base"):
            call = run(dispatcher, transport, "metrc_get_plant", plant_id=7, plant_label="1A4")
        assert call["path"] == "/plants/v2/7"
        assert "using plant_id" in caplog.text

    def test_neither_raises(self, dispatcher, transport):
        with pytest.raises(AmbiguousIdentifierError, match="Provide plant_id or plant_label"):
            run(dispatcher, transport, "metrc_get_plant")
        assert transport.calls == []


# -----------------------------------------------------------------------------
# Cultivation flow
# -----------------------------------------------------------------------------

PLANTING_ARGS = {
    "plant_batch_name": " Batch A ",
    "location_id": 4,
    "type": "Clone",
    "count": 2,
    "planting_date": "2025-01-15",
    "plant_labels": ["1A40000001", "1A40000002"],
}


class TestPlantings:
    def test_one_body_entry_per_label(self, dispatcher, transport):
        call = run(dispatcher, transport, "metrc_create_plant_batch_plantings", strain_id=3, **PLANTING_ARGS)
        assert call["path"] == "/plantbatches/v2/plantings"
        assert call["method"] == "POST"
        assert call["body"] == [
            {
                "PlantBatchName": "Batch A",
                "Type": "Clone",
                "Count": 1,
                "LocationId": 4,
                "ActualDate": "2025-01-15",
                "PlantLabel": label,
                "StrainId": 3,
            }
            for label in PLANTING_ARGS["plant_labels"]
        ]

    def test_strain_name_used_without_id(self, dispatcher, transport):
        call = run(
            dispatcher, transport, "metrc_create_plant_batch_plantings", strain_name="SBX Strain 1", **PLANTING_ARGS
        )
        assert call["body"][0]["Strain"] == "SBX Strain 1"
        assert "StrainId" not in call["body"][0]

    def test_missing_strain(self, dispatcher, transport):
        with pytest.raises(AmbiguousIdentifierError, match="Provide strain_id or strain_name"):
            run(dispatcher, transport, "metrc_create_plant_batch_plantings", **PLANTING_ARGS)

    def test_labels_as_json_string_are_decoded(self, dispatcher, transport):
        args = {**PLANTING_ARGS, "plant_labels": '["1A40000009"]'}
        call = run(dispatcher, transport, "metrc_create_plant_batch_plantings", strain_id=3, **args)
        assert [entry["PlantLabel"] for entry in call["body"]] == ["1A40000009"]

    def test_labels_as_plain_string_fail_validation(self, dispatcher, transport):
        args = {**PLANTING_ARGS, "plant_labels": "1A40000009"}
        with pytest.raises(InvalidToolInputError, match="plant_labels: expected array, got string"):
            run(dispatcher, transport, "metrc_create_plant_batch_plantings", strain_id=3, **args)

    def test_blank_batch_name(self, dispatcher, transport):
        args = {**PLANTING_ARGS, "plant_batch_name": "   "}
        with pytest.raises(InvalidToolInputError, match="plant_batch_name: must not be blank"):
            run(dispatcher, transport, "metrc_create_plant_batch_plantings", strain_id=3, **args)


class TestGrowthPhase:
    def test_plants_by_ids_and_labels(self, dispatcher, transport):
        call = run(
            dispatcher,
            transport,
            "metrc_change_plants_growth_phase",
            growth_phase="Flowering",
            change_date="2025-02-01",
            plant_ids=[1, 2],
            plant_labels=["1A4"],
            new_location="Flower Room",
        )
        assert call["path"] == "/plants/v2/growthphase"
        assert call["method"] == "PUT"
        entry = {"GrowthPhase": "Flowering", "GrowthDate": "2025-02-01", "NewLocation": "Flower Room"}
        assert call["body"] == [{"Id": 1, **entry}, {"Id": 2, **entry}, {"Label": "1A4", **entry}]

    def test_plants_without_targets(self, dispatcher, transport):
        with pytest.raises(AmbiguousIdentifierError, match="Provide plant_ids or plant_labels"):
            run(
                dispatcher,
                transport,
                "metrc_change_plants_growth_phase",
                growth_phase="Flowering",
                change_date="2025-02-01",
                plant_ids=[],
            )

    def test_batch_growth_phase(self, dispatcher, transport):
        call = run(
            dispatcher,
            transport,
            "metrc_change_plant_batch_growth_phase",
            plant_batch_name="Batch A",
            count=2,
            starting_tag="1A40000003",
            growth_phase="Vegetative",
            growth_date="2025-01-20",
            new_location="Veg Room",
        )
        assert call["path"] == "/plantbatches/v2/growthphase"
        assert call["method"] == "POST"
        assert call["body"] == [
            {
                "Name": "Batch A",
                "Count": 2,
                "StartingTag": "1A40000003",
                "GrowthPhase": "Vegetative",
                "GrowthDate": "2025-01-20",
                "NewLocation": "Veg Room",
            }
        ]


class TestHarvestPlants:
    def test_defaults_applied(self, dispatcher, transport):
        """Weight and unit fall back to 1 Ounces"""
        call = run(
            dispatcher,
            transport,
            "metrc_harvest_plants",
            harvest_name="H1",
            harvest_date="2025-03-01",
            plant_ids=[10],
        )
        assert call["path"] == "/plants/v2/harvest"
        assert call["method"] == "PUT"
        assert call["body"] == [
            {
                "HarvestName": "H1",
                "HarvestDate": "2025-03-01",
                "Id": 10,
                "Weight": 1,
                "UnitOfMeasure": "Ounces",
                "ActualDate": "2025-03-01",
            }
        ]

    def test_explicit_empty_unit_kept(self, dispatcher, transport):
        """Only an omitted unit falls back to Ounces"""
        call = run(
            dispatcher,
            transport,
            "metrc_harvest_plants",
            harvest_name="H1",
            harvest_date="2025-03-01",
            plant_ids=[10],
            unit_of_measure="",
            weight_per_plant=0,
        )
        assert call["body"][0]["UnitOfMeasure"] == ""
        assert call["body"][0]["Weight"] == 0

    def test_labels_and_drying_location(self, dispatcher, transport):
        call = run(
            dispatcher,
            transport,
            "metrc_harvest_plants",
            harvest_name="H1",
            harvest_date="2025-03-01",
            plant_ids=[10, 11],
            plant_labels=["1A4A", "1A4B"],
            weight_per_plant=2.5,
            unit_of_measure="Grams",
            drying_location_id=6,
        )
        assert [(e["Id"], e["Label"], e["DryingLocationId"]) for e in call["body"]] == [
            (10, "1A4A", 6),
            (11, "1A4B", 6),
        ]
        assert {e["Weight"] for e in call["body"]} == {2.5}

    def test_label_count_mismatch_is_logged(self, dispatcher, transport, caplog):
        with caplog.at_level(logging.WARNING, logger="metrc_mcp.tools.plants"):
            call = run(
                dispatcher,
                transport,
                "metrc_harvest_plants",
                harvest_name="H1",
                harvest_date="2025-03-01",
                plant_ids=[10, 11],
                plant_labels=["1A4A"],
            )
        assert "Label" not in call["body"][1]
        assert "paired by position" in caplog.text


# -----------------------------------------------------------------------------
# Harvests
# -----------------------------------------------------------------------------

class TestHarvests:
    @pytest.mark.parametrize(
        "name,extra,path,field",
        [
            ("metrc_move_harvest", {"location_id": 8}, "/harvests/v2/location", ("LocationId", 8)),
            ("metrc_rename_harvest", {"new_name": "H2"}, "/harvests/v2/rename", ("NewName", "H2")),
            ("metrc_finish_harvest", {"actual_date": "2025-04-01"}, "/harvests/v2/finish", ("ActualDate", "2025-04-01")),
            ("metrc_unfinish_harvest", {"actual_date": "2025-04-02"}, "/harvests/v2/unfinish", ("ActualDate", "2025-04-02")),
        ],
    )
    def test_updates(self, dispatcher, transport, name, extra, path, field):
        call = run(dispatcher, transport, name, harvest_id=21, **extra)
        assert call["path"] == path
        assert call["method"] == "PUT"
        assert call["body"] == [{"Id": 21, field[0]: field[1]}]

    def test_get_harvest(self, dispatcher, transport):
        assert run(dispatcher, transport, "metrc_get_harvest", harvest_id=21)["path"] == "/harvests/v2/21"

    def test_packages_pass_through(self, dispatcher, transport):
        packages = [{"Tag": "1A4P", "ItemId": 2, "Quantity": 5}]
        call = run(dispatcher, transport, "metrc_create_harvest_packages", harvest_id=21, packages=packages)
        assert call["path"] == "/harvests/v2/packages"
        assert call["body"] == packages

    def test_packages_must_be_objects(self, dispatcher, transport):
        with pytest.raises(InvalidToolInputError, match=r"packages\[0\]: expected object"):
            run(dispatcher, transport, "metrc_create_harvest_packages", packages=["1A4P"])

    def test_waste(self, dispatcher, transport):
        call = run(
            dispatcher,
            transport,
            "metrc_post_harvest_waste",
            harvest_id=21,
            harvest_name="H1",
            waste_method_id=1,
            waste_amount=0.5,
            waste_unit_of_measure="Grams",
            waste_date="2025-04-01",
        )
        assert call["path"] == "/harvests/v2/waste"
        assert call["body"][0]["ReasonNote"] == ""
        assert call["body"][0]["WasteAmount"] == 0.5


# -----------------------------------------------------------------------------
# Packages
# -----------------------------------------------------------------------------

class TestPackages:
    def test_create_package_defaults(self, dispatcher, transport):
        call = run(
            dispatcher,
            transport,
            "metrc_create_package",
            tag="1A4P",
            location_id=4,
            item_id=2,
            quantity=10,
            unit_of_measure="Grams",
            actual_date="2025-04-01",
        )
        assert call["path"] == "/packages/v2/"
        assert call["method"] == "POST"
        assert call["body"] == [
            {
                "Tag": "1A4P",
                "LocationId": 4,
                "ItemId": 2,
                "Quantity": 10,
                "UnitOfMeasure": "Grams",
                "IsProductionBatch": False,
                "ProductRequiresRemediation": False,
                "ActualDate": "2025-04-01",
            }
        ]

    def test_create_package_with_ingredients(self, dispatcher, transport):
        ingredients = [{"Package": "1A4Q", "Quantity": 1, "UnitOfMeasure": "Grams"}]
        call = run(
            dispatcher,
            transport,
            "metrc_create_package",
            tag="1A4P",
            location_id=4,
            item_id=2,
            quantity=10,
            unit_of_measure="Grams",
            actual_date="2025-04-01",
            is_production_batch=True,
            ingredients=ingredients,
        )
        assert call["body"][0]["IsProductionBatch"] is True
        assert call["body"][0]["Ingredients"] == ingredients

    def test_adjust_single(self, dispatcher, transport):
        call = run(
            dispatcher,
            transport,
            "metrc_adjust_package",
            label="1A4P",
            quantity=-1,
            unit_of_measure="Grams",
            adjustment_reason="Drying",
            adjustment_date="2025-04-02",
        )
        assert call["path"] == "/packages/v2/adjust"
        assert call["body"] == [
            {
                "Label": "1A4P",
                "Quantity": -1,
                "UnitOfMeasure": "Grams",
                "AdjustmentReason": "Drying",
                "AdjustmentDate": "2025-04-02",
                "ReasonNote": "",
            }
        ]

    def test_bulk_adjust_maps_each_entry(self, dispatcher, transport):
        adjustments = [
            {
                "label": "1A4P",
                "quantity": -1,
                "unit_of_measure": "Grams",
                "adjustment_reason": "Drying",
                "adjustment_date": "2025-04-02",
                "reason_note": "moisture",
            },
            {
                "label": "1A4Q",
                "quantity": 2,
                "unit_of_measure": "Grams",
                "adjustment_reason": "Scale",
                "adjustment_date": "2025-04-02",
            },
        ]
        call = run(dispatcher, transport, "metrc_bulk_adjust_packages", adjustments=adjustments)
        assert [entry["Label"] for entry in call["body"]] == ["1A4P", "1A4Q"]
        assert [entry["ReasonNote"] for entry in call["body"]] == ["moisture", ""]

    @pytest.mark.parametrize(
        "name,field",
        [
            ("metrc_bulk_adjust_packages", "adjustments"),
            ("metrc_bulk_change_package_location", "moves"),
        ],
    )
    def test_bulk_requires_entries(self, dispatcher, transport, name, field):
        with pytest.raises(InvalidToolInputError, match=f"{field}: expected a non-empty array"):
            run(dispatcher, transport, name, **{field: []})
        assert transport.calls == []

    def test_bulk_finish_requires_labels(self, dispatcher, transport):
        with pytest.raises(InvalidToolInputError, match="labels: expected a non-empty array"):
            run(dispatcher, transport, "metrc_bulk_finish_packages", actual_date="2025-04-03", labels=[])

    def test_move(self, dispatcher, transport):
        call = run(dispatcher, transport, "metrc_change_package_location", label="1A4P", location_id=9)
        assert call["method"] == "PUT"
        assert call["body"] == [{"Label": "1A4P", "LocationId": 9}]

        call = run(
            dispatcher,
            transport,
            "metrc_bulk_change_package_location",
            moves=[{"label": "1A4P", "location_id": 9}, {"label": "1A4Q", "location_id": 10}],
        )
        assert call["body"] == [{"Label": "1A4P", "LocationId": 9}, {"Label": "1A4Q", "LocationId": 10}]

    @pytest.mark.parametrize(
        "name,path",
        [
            ("metrc_finish_package", "/packages/v2/finish"),
            ("metrc_unfinish_package", "/packages/v2/unfinish"),
        ],
    )
    def test_finish_and_unfinish(self, dispatcher, transport, name, path):
        call = run(dispatcher, transport, name, label="1A4P", actual_date="2025-04-03")
        assert call["path"] == path
        assert call["body"] == [{"Label": "1A4P", "ActualDate": "2025-04-03"}]

    def test_bulk_finish(self, dispatcher, transport):
        call = run(
            dispatcher, transport, "metrc_bulk_finish_packages", actual_date="2025-04-03", labels=["A", "B"]
        )
        assert call["body"] == [
            {"Label": "A", "ActualDate": "2025-04-03"},
            {"Label": "B", "ActualDate": "2025-04-03"},
        ]

    def test_remediate(self, dispatcher, transport):
        call = run(
            dispatcher,
            transport,
            "metrc_remediate_package",
            package_label="1A4P",
            remediation_method="Further Drying",
            remediation_date="2025-04-04",
        )
        assert call["path"] == "/packages/v2/remediate"
        assert call["body"] == [
            {"Label": "1A4P", "RemediationMethodName": "Further Drying", "RemediationDate": "2025-04-04"}
        ]


# -----------------------------------------------------------------------------
# Items, strains, locations
# -----------------------------------------------------------------------------

class TestItemsAndStrains:
    def test_create_item_drops_unset_fields(self, dispatcher, transport):
        call = run(
            dispatcher,
            transport,
            "metrc_create_item",
            name="Buds A",
            item_category="Buds",
            unit_of_measure="Grams",
            strain_id=3,
        )
        assert call["path"] == "/items/v2/"
        assert call["body"] == [
            {"Name": "Buds A", "ItemCategory": "Buds", "UnitOfMeasure": "Grams", "StrainId": 3}
        ]

    def test_update_item_keeps_id_only_fields(self, dispatcher, transport):
        call = run(dispatcher, transport, "metrc_update_item", id=14, name="Buds B")
        assert call["method"] == "PUT"
        assert call["body"] == [{"Id": 14, "Name": "Buds B"}]

    def test_create_strain(self, dispatcher, transport):
        call = run(
            dispatcher,
            transport,
            "metrc_create_strain",
            name="SBX Strain 2",
            testing_status="None",
            indica_percentage=60,
            sativa_percentage=40,
        )
        assert call["path"] == "/strains/v2/"
        assert call["body"] == [
            {
                "Name": "SBX Strain 2",
                "TestingStatus": "None",
                "IndicaPercentage": 60,
                "SativaPercentage": 40,
            }
        ]

    def test_update_strain(self, dispatcher, transport):
        call = run(dispatcher, transport, "metrc_update_strain", id=3, thc_level=0.2)
        assert call["body"] == [{"Id": 3, "ThcLevel": 0.2}]

    def test_create_location(self, dispatcher, transport):
        call = run(dispatcher, transport, "metrc_create_location", name="Veg Room", location_type_id=2)
        assert call["path"] == "/locations/v2/"
        assert call["body"] == [{"Name": "Veg Room", "LocationTypeId": 2}]


# -----------------------------------------------------------------------------
# Transfers, lab tests, sales
# -----------------------------------------------------------------------------

class TestTransfersLabSales:
    TRANSFER = {
        "shipper_license_number": "SF-SBX-CO-1-8001",
        "transfer_type_name": "Transfer",
        "estimated_departure_date": "2025-05-01",
        "estimated_arrival_date": "2025-05-02",
        "packages": [{"PackageLabel": "1A4P", "WholesalePrice": 10}],
    }

    def test_transfer_without_transporter(self, dispatcher, transport):
        call = run(dispatcher, transport, "metrc_create_transfer", **self.TRANSFER)
        assert call["path"] == "/transfers/v2/external/incoming"
        transfer = call["body"][0]
        assert transfer["ShipperLicenseNumber"] == "SF-SBX-CO-1-8001"
        assert transfer["EstimatedDepartureDateTime"] == "2025-05-01"
        assert transfer["Packages"] == self.TRANSFER["packages"]
        assert "Transporters" not in transfer

    def test_transfer_with_transporter(self, dispatcher, transport):
        call = run(
            dispatcher, transport, "metrc_create_transfer", transporter_license_number="T-1", **self.TRANSFER
        )
        assert call["body"][0]["Transporters"] == [
            {
                "TransporterLicenseNumber": "T-1",
                "EstimatedDepartureDateTime": "2025-05-01",
                "EstimatedArrivalDateTime": "2025-05-02",
            }
        ]

    def test_record_lab_results(self, dispatcher, transport):
        results = [{"LabTestTypeName": "THC", "Quantity": 20.1, "Passed": True}]
        call = run(
            dispatcher,
            transport,
            "metrc_record_lab_test_results",
            package_label="1A4P",
            result_date="2025-05-03",
            overall_passed=True,
            results=results,
        )
        assert call["path"] == "/labtests/v2/record"
        assert call["body"] == [
            {"PackageLabel": "1A4P", "ResultDate": "2025-05-03", "OverallPassed": True, "Results": results}
        ]

    def test_sales_receipt(self, dispatcher, transport):
        transactions = [{"PackageLabel": "1A4P", "Quantity": 1, "UnitOfMeasure": "Grams", "TotalAmount": 12}]
        call = run(
            dispatcher,
            transport,
            "metrc_create_sales_receipt",
            receipt_date="2025-05-04",
            sales_customer_type="Patient",
            patient_license_number="P-1",
            transactions=transactions,
        )
        assert call["path"] == "/sales/v2/receipts"
        assert call["body"] == [
            {
                "SalesDate": "2025-05-04",
                "SalesCustomerType": "Patient",
                "Transactions": transactions,
                "PatientLicenseNumber": "P-1",
            }
        ]

    def test_sales_receipt_needs_transactions(self, dispatcher, transport):
        with pytest.raises(InvalidToolInputError, match="transactions: expected a non-empty array"):
            run(
                dispatcher,
                transport,
                "metrc_create_sales_receipt",
                receipt_date="2025-05-04",
                sales_customer_type="Consumer",
                transactions=[],
            )
