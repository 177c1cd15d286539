import pytest

from building_registry.errors import AlreadyExists, InvalidInput, NotFound, ReferenceInUse
from building_registry.schemas.building import BuildingCreate
from building_registry.schemas.provider import ProviderCreate, ProviderUpdate
from building_registry.services.buildings import BuildingRegistry
from building_registry.services.providers import ProviderService


@pytest.mark.asyncio
async def test_create_and_get(seeded, writer):
    service = ProviderService(seeded)
    provider = await service.create(
        ProviderCreate(name="Play", technology="5G", bandwidth=300), writer
    )
    assert provider.id is not None

    fetched = await service.get(provider.id)
    assert fetched.name == "Play"


@pytest.mark.asyncio
async def test_duplicate_name(seeded, writer):
    service = ProviderService(seeded)
    with pytest.raises(AlreadyExists) as exc_info:
        await service.create(ProviderCreate(name="Netia", technology="FTTH", bandwidth=100), writer)
    assert exc_info.value.code == "Netia"

    with pytest.raises(AlreadyExists):
        await service.update(1, ProviderUpdate(name="Netia"), writer)


@pytest.mark.asyncio
async def test_partial_update(seeded, writer):
    service = ProviderService(seeded)
    provider = await service.update(2, ProviderUpdate(bandwidth=1000), writer)
    assert provider.bandwidth == 1000
    assert provider.technology == "HFC"

    with pytest.raises(InvalidInput):
        await service.update(2, ProviderUpdate(name=None), writer)


@pytest.mark.asyncio
async def test_list_filters_and_order(seeded):
    service = ProviderService(seeded)

    everything = await service.list()
    assert [p.name for p in everything.data] == ["Netia", "Orange Polska"]

    assert [p.name for p in (await service.list(search="ORANGE")).data] == ["Orange Polska"]
    assert [p.name for p in (await service.list(technology="hfc")).data] == ["Netia"]


@pytest.mark.asyncio
async def test_delete_unused(seeded, writer):
    service = ProviderService(seeded)
    await service.delete(2, writer)

    with pytest.raises(NotFound):
        await service.get(2)


@pytest.mark.asyncio
async def test_delete_refused_while_referenced(seeded, writer, building_payload):
    await BuildingRegistry(seeded).create(BuildingCreate(**building_payload(provider_id=1)), writer)

    with pytest.raises(ReferenceInUse) as exc_info:
        await ProviderService(seeded).delete(1, writer)
    assert exc_info.value.dependents == {"buildings": 1}


@pytest.mark.asyncio
async def test_delete_unknown(seeded, writer):
    with pytest.raises(NotFound):
        await ProviderService(seeded).delete(404, writer)
