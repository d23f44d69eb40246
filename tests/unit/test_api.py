"""HTTP-level tests: routing, status codes and error mapping."""

import pytest

from core.errors import CatalogError


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


@pytest.mark.asyncio
async def test_create_and_fetch_resource(client):
    types = await client.post("/types", json={"name": "Video"})
    assert types.status_code == 201
    type_id = types.json()["id"]

    created = await client.post(
        "/resources",
        json={"name": "Intro", "url": "https://intro", "type_id": type_id, "tags": "a,b", "internal": True},
    )
    assert created.status_code == 201
    resource_id = created.json()["id"]

    fetched = await client.get(f"/resources/{resource_id}")
    assert fetched.status_code == 200
    body = fetched.json()
    assert body["name"] == "Intro"
    assert body["type_name"] == "Video"
    assert body["internal"] is True


@pytest.mark.asyncio
async def test_list_resources_forwards_query_to_filter(client, catalog):
    await client.post("/resources", json={"name": "One"})

    response = await client.get(
        "/resources",
        params={"search": "on", "sortBy": "type_name", "sortOrder": "asc", "obsolete": "false"},
    )

    assert response.status_code == 200
    assert [row["name"] for row in response.json()] == ["One"]
    resource_filter = catalog.list_calls[-1]
    assert resource_filter.search == "on"
    assert resource_filter.sort_by.value == "type_name"
    assert resource_filter.sort_order.value == "ASC"
    assert resource_filter.obsolete is False


@pytest.mark.parametrize(
    "params",
    [{"sortBy": "id; DROP TABLE resources"}, {"sortBy": "password"}, {"sortOrder": "sideways"}],
)
@pytest.mark.asyncio
async def test_bad_sort_is_422(client, catalog, params):
    response = await client.get("/resources", params=params)

    assert response.status_code == 422
    assert "sort" in response.json()["detail"].lower()
    assert catalog.list_calls == []


@pytest.mark.asyncio
async def test_empty_name_is_422(client, catalog):
    response = await client.post("/resources", json={"name": "   "})

    assert response.status_code == 422
    assert response.json() == {"detail": "Resource name is required."}
    assert catalog.resources == {}


@pytest.mark.parametrize(("method", "path"), [("GET", "/resources/7"), ("DELETE", "/resources/7"), ("DELETE", "/types/7")])
@pytest.mark.asyncio
async def test_unknown_ids_are_404(client, method, path):
    response = await client.request(method, path)

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_update_unknown_resource_is_404(client):
    response = await client.put("/resources/7", json={"name": "x"})

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_duplicate_type_is_409(client):
    await client.post("/types", json={"name": "Video"})

    response = await client.post("/types", json={"name": "VIDEO"})

    assert response.status_code == 409
    assert "already exists" in response.json()["detail"]


@pytest.mark.asyncio
async def test_delete_type_reports_detached_resources(client):
    type_id = (await client.post("/types", json={"name": "Video"})).json()["id"]
    await client.post("/resources", json={"name": "Clip", "type_id": type_id})

    response = await client.delete(f"/types/{type_id}")

    assert response.status_code == 200
    assert response.json() == {"ok": True, "type_id": type_id, "name": "Video", "detached_resources": 1}
    listed = (await client.get("/types")).json()
    assert listed == {"types": [], "count": 0}


@pytest.mark.asyncio
async def test_storage_errors_are_500_without_driver_details(client, catalog):
    catalog.failing_names.add("Boom")

    response = await client.post("/resources", json={"name": "Boom"})

    assert response.status_code == 500
    assert response.json() == {"detail": "Internal server error."}


@pytest.mark.asyncio
async def test_import_endpoint_returns_summary(client, catalog, make_csv):
    data = make_csv("First,,,,,,,", ",no name,,,,,,", "Third,,,,,,,")

    response = await client.post("/transfer/import", files={"file": ("resources.csv", data, "text/csv")})

    assert response.status_code == 200
    body = response.json()
    assert body["imported_count"] == 2
    assert body["error_count"] == 1
    assert body["error_details"][0]["row"] == 2
    assert body["error_details"][0]["raw"]["Description"] == "no name"
    assert len(catalog.resources) == 2


@pytest.mark.asyncio
async def test_import_endpoint_rejects_malformed_csv(client, catalog):
    data = b'Name,URL\r\n"broken"x,https://x\r\n'

    response = await client.post("/transfer/import", files={"file": ("resources.csv", data, "text/csv")})

    assert response.status_code == 400
    assert catalog.resources == {}


@pytest.mark.asyncio
async def test_import_endpoint_rejects_other_file_types(client, make_csv):
    response = await client.post(
        "/transfer/import", files={"file": ("resources.xlsx", make_csv("A,,,,,,,"), "application/octet-stream")}
    )

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_import_endpoint_enforces_size_limit(client, make_csv, monkeypatch):
    monkeypatch.setenv("MAX_IMPORT_BYTES", "32")

    response = await client.post(
        "/transfer/import", files={"file": ("resources.csv", make_csv("A,,,,,,,"), "text/csv")}
    )

    assert response.status_code == 413


@pytest.mark.asyncio
async def test_export_endpoint_streams_csv(client, export_dir):
    await client.post("/resources", json={"name": "Docs", "tags": "a,b"})

    response = await client.get("/transfer/export")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert response.headers["content-disposition"] == 'attachment; filename="resources.csv"'
    lines = response.text.splitlines()
    assert lines[0] == "Name,Description,URL,Type,Internal,Date Created,Tags,Obsolete"
    assert lines[1].startswith('Docs,,,,false,')
    assert lines[1].endswith(',"a,b",false')
    assert list(export_dir.iterdir()) == []


def test_every_catalog_error_has_a_client_facing_status():
    statuses = {cls.__name__: cls.status_code for cls in CatalogError.__subclasses__()}

    assert statuses == {
        "ValidationError": 422,
        "DuplicateType": 409,
        "NotFound": 404,
        "InvalidFilter": 422,
        "ParseError": 400,
        "PayloadTooLarge": 413,
        "StorageError": 500,
    }
