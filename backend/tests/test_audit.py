import json
import logging

import pytest

from building_registry.schemas.building import BuildingCreate, BuildingUpdate
from building_registry.schemas.dictionary import DictionaryEntryUpdate
from building_registry.services.buildings import BuildingRegistry
from building_registry.services.dictionary import DictionaryService
from building_registry.services.territory import Level
from building_registry.utils.audit import diff_fields


def _audit_events(caplog):
    return [
        json.loads(record.getMessage())
        for record in caplog.records
        if record.name == "building_registry.audit"
    ]


def test_diff_fields_keeps_only_changed_values():
    before = {"street_code": None, "post_code": "00-001"}
    after = {"street_code": "10843", "post_code": "00-001"}
    assert diff_fields(before, after) == {"street_code": {"from": None, "to": "10843"}}


@pytest.mark.asyncio
async def test_building_update_records_code_and_name_changes(seeded, writer, building_payload, caplog):
    caplog.set_level(logging.INFO, logger="building_registry.audit")
    registry = BuildingRegistry(seeded)
    building = await registry.create(BuildingCreate(**building_payload()), writer)

    await registry.update(
        building.id, BuildingUpdate(street_code="10843", post_code="00-001"), writer
    )

    created, updated = _audit_events(caplog)
    assert created["event"] == "building_created"
    assert created["entity_id"] == str(building.id)
    assert created["details"]["building_number"] == "42A"

    assert updated["event"] == "building_updated"
    assert updated["actor_id"] == str(writer.id)
    assert updated["actor_role"] == "WRITE"
    assert updated["changes"] == {
        "street_code": {"from": None, "to": "10843"},
        "street_name": {"from": None, "to": "ul. Marszałkowska"},
    }


@pytest.mark.asyncio
async def test_dictionary_rename_is_audited_per_level(seeded, admin, caplog):
    caplog.set_level(logging.INFO, logger="building_registry.audit")

    await DictionaryService(seeded).update(
        Level.CITY_SUBDIVISION, "0918130", DictionaryEntryUpdate(name="Mokotów Górny"), admin
    )

    (event,) = _audit_events(caplog)
    assert event["event"] == "city_subdivision_updated"
    assert event["entity"] == "city_subdivision"
    assert event["entity_id"] == "0918130"
    assert event["changes"] == {"name": {"from": "Mokotów", "to": "Mokotów Górny"}}
