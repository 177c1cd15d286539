import uuid

import pytest

from building_registry.auth.jwt import Role, create_access_token


@pytest.mark.asyncio
async def test_health(client):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "healthy"


@pytest.mark.asyncio
async def test_missing_token(client):
    resp = await client.get("/api/v1/buildings")
    assert resp.status_code in (401, 403)


@pytest.mark.asyncio
async def test_invalid_token(client):
    resp = await client.get(
        "/api/v1/buildings", headers={"Authorization": "Bearer not-a-token"}
    )
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_token_with_unknown_role(client):
    token = create_access_token(str(uuid.uuid4()), "SUPERUSER")
    resp = await client.get("/api/v1/buildings", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_reader_cannot_create(client, auth_headers, building_payload):
    resp = await client.post(
        "/api/v1/buildings", json=building_payload(), headers=auth_headers(Role.READ)
    )
    assert resp.status_code == 403
    detail = resp.json()["detail"]
    assert detail["error_code"] == "FORBIDDEN"
    assert set(detail["required"]) == {"WRITE", "ADMIN"}


@pytest.mark.asyncio
async def test_create_and_fetch_building(client, auth_headers, building_payload):
    user_id = uuid.uuid4()
    resp = await client.post(
        "/api/v1/buildings",
        json=building_payload(street_code="10843"),
        headers=auth_headers(Role.WRITE, user_id),
    )
    assert resp.status_code == 201
    body = resp.json()
    assert body["region_name"] == "Mazowieckie"
    assert body["street_name"] == "ul. Marszałkowska"
    assert body["created_by"] == str(user_id)

    resp = await client.get(f"/api/v1/buildings/{body['id']}", headers=auth_headers())
    assert resp.status_code == 200
    assert resp.json()["building_number"] == "42A"


@pytest.mark.asyncio
async def test_duplicate_building_conflict(client, auth_headers, building_payload):
    headers = auth_headers(Role.WRITE)
    first = await client.post("/api/v1/buildings", json=building_payload(), headers=headers)
    assert first.status_code == 201

    resp = await client.post("/api/v1/buildings", json=building_payload(), headers=headers)
    assert resp.status_code == 409
    assert resp.json()["detail"]["error_code"] == "DUPLICATE_BUILDING"


@pytest.mark.asyncio
async def test_unknown_reference_names_level(client, auth_headers, building_payload):
    resp = await client.post(
        "/api/v1/buildings",
        json=building_payload(district_code="9999"),
        headers=auth_headers(Role.WRITE),
    )
    assert resp.status_code == 404
    detail = resp.json()["detail"]
    assert detail["error_code"] == "UNKNOWN_REFERENCE"
    assert detail["level"] == "district"
    assert detail["code"] == "9999"


@pytest.mark.asyncio
async def test_malformed_body_is_invalid_input(client, auth_headers, building_payload):
    resp = await client.post(
        "/api/v1/buildings",
        json=building_payload(post_code="00001", longitude=200),
        headers=auth_headers(Role.WRITE),
    )
    assert resp.status_code == 400
    detail = resp.json()["detail"]
    assert detail["error_code"] == "INVALID_INPUT"
    assert len(detail["errors"]) == 2


@pytest.mark.asyncio
async def test_patch_building(client, auth_headers, building_payload):
    headers = auth_headers(Role.WRITE)
    created = (await client.post("/api/v1/buildings", json=building_payload(), headers=headers)).json()

    resp = await client.patch(
        f"/api/v1/buildings/{created['id']}", json={"post_code": "00-950"}, headers=headers
    )
    assert resp.status_code == 200
    assert resp.json()["post_code"] == "00-950"
    assert resp.json()["building_number"] == "42A"


@pytest.mark.asyncio
async def test_building_not_found(client, auth_headers):
    resp = await client.get(f"/api/v1/buildings/{uuid.uuid4()}", headers=auth_headers())
    assert resp.status_code == 404
    assert resp.json()["detail"]["error_code"] == "NOT_FOUND"


@pytest.mark.asyncio
async def test_list_envelope(client, auth_headers, building_payload):
    await client.post("/api/v1/buildings", json=building_payload(), headers=auth_headers(Role.WRITE))

    resp = await client.get("/api/v1/buildings", params={"pageSize": 5}, headers=auth_headers())
    assert resp.status_code == 200
    body = resp.json()
    assert body["page"] == 1
    assert body["pageSize"] == 5
    assert body["total"] == 1
    assert body["data"][0]["provider_name"] == "Orange Polska"


@pytest.mark.asyncio
async def test_list_errors(client, auth_headers):
    headers = auth_headers()

    resp = await client.get("/api/v1/buildings", params={"provider_id": 999}, headers=headers)
    assert resp.status_code == 404
    assert resp.json()["detail"]["error_code"] == "UNKNOWN_REFERENCE"

    resp = await client.get("/api/v1/buildings", params={"pageSize": 500}, headers=headers)
    assert resp.status_code == 400
    assert resp.json()["detail"]["field"] == "pageSize"

    resp = await client.get("/api/v1/providers", params={"page": 3}, headers=headers)
    assert resp.status_code == 404
    assert resp.json()["detail"]["error_code"] == "PAGE_OUT_OF_RANGE"


@pytest.mark.asyncio
async def test_provider_crud(client, auth_headers):
    headers = auth_headers(Role.WRITE)

    resp = await client.post(
        "/api/v1/providers",
        json={"name": "Play", "technology": "5G", "bandwidth": 300},
        headers=headers,
    )
    assert resp.status_code == 201
    provider_id = resp.json()["id"]

    resp = await client.patch(
        f"/api/v1/providers/{provider_id}", json={"bandwidth": 600}, headers=headers
    )
    assert resp.json()["bandwidth"] == 600

    resp = await client.post(
        "/api/v1/providers",
        json={"name": "Play", "technology": "LTE", "bandwidth": 100},
        headers=headers,
    )
    assert resp.status_code == 409
    assert resp.json()["detail"]["error_code"] == "ALREADY_EXISTS"

    resp = await client.delete(f"/api/v1/providers/{provider_id}", headers=headers)
    assert resp.status_code == 204

    resp = await client.get(f"/api/v1/providers/{provider_id}", headers=headers)
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_provider_in_use(client, auth_headers, building_payload):
    headers = auth_headers(Role.WRITE)
    await client.post("/api/v1/buildings", json=building_payload(), headers=headers)

    resp = await client.delete("/api/v1/providers/1", headers=headers)
    assert resp.status_code == 409
    detail = resp.json()["detail"]
    assert detail["error_code"] == "REFERENCE_IN_USE"
    assert detail["dependents"] == {"buildings": 1}


@pytest.mark.asyncio
async def test_dictionary_routes(client, auth_headers):
    headers = auth_headers(Role.WRITE)

    resp = await client.get("/api/v1/teryt/districts", params={"parent_code": "14"}, headers=headers)
    assert resp.status_code == 200
    assert [d["code"] for d in resp.json()["data"]] == ["1465"]

    resp = await client.get("/api/v1/teryt/cities/parent-options", headers=headers)
    assert {o["code"] for o in resp.json()} == {"1465011", "1261011"}

    resp = await client.post(
        "/api/v1/teryt/streets", json={"code": "99999", "name": "ul. Prosta"}, headers=headers
    )
    assert resp.status_code == 201

    resp = await client.patch(
        "/api/v1/teryt/streets/99999", json={"name": "ul. Krzywa"}, headers=headers
    )
    assert resp.json()["name"] == "ul. Krzywa"

    resp = await client.get("/api/v1/teryt/streets/99999", headers=headers)
    assert resp.json() == {"code": "99999", "name": "ul. Krzywa", "parent_code": None}


@pytest.mark.asyncio
async def test_dictionary_delete_requires_admin(client, auth_headers):
    resp = await client.delete("/api/v1/teryt/streets/05432", headers=auth_headers(Role.WRITE))
    assert resp.status_code == 403
    assert resp.json()["detail"]["required"] == ["ADMIN"]

    resp = await client.delete("/api/v1/teryt/streets/05432", headers=auth_headers(Role.ADMIN))
    assert resp.status_code == 204

    resp = await client.delete("/api/v1/teryt/regions/14", headers=auth_headers(Role.ADMIN))
    assert resp.status_code == 409
    assert resp.json()["detail"]["error_code"] == "REFERENCE_IN_USE"


@pytest.mark.asyncio
async def test_unknown_dictionary_resource(client, auth_headers):
    resp = await client.get("/api/v1/teryt/voivodeships", headers=auth_headers())
    assert resp.status_code == 400
    assert resp.json()["detail"]["field"] == "resource"
