from decimal import Decimal

import pytest

from conftest import bearer, login, register

MARKER = {
    "name": "Bambu Petung",
    "latitude": "-7.79560000",
    "longitude": "110.36950000",
    "description": "Clump near the river",
    "strain": "Dendrocalamus asper",
    "quantity": 12,
    "owner_name": "Pak Budi",
    "owner_contact": "08123456789",
}


def create_marker(client, headers, **overrides):
    payload = dict(MARKER, **overrides)
    resp = client.post("/api/v1/markers", json=payload, headers=headers)
    assert resp.status_code == 201, resp.get_json()
    return resp.get_json()["data"]


def test_create_requires_auth(client):
    resp = client.post("/api/v1/markers", json=MARKER)
    assert resp.status_code == 401


def test_create_marker(client, auth_headers):
    me = client.get("/api/v1/auth/me", headers=auth_headers).get_json()["data"]
    data = create_marker(client, auth_headers)

    assert data["creator_id"] == me["id"]
    assert data["name"] == "Bambu Petung"
    assert Decimal(data["latitude"]) == Decimal("-7.7956")
    assert Decimal(data["longitude"]) == Decimal("110.3695")
    assert data["quantity"] == 12
    assert len(data["short_code"]) == 8
    assert data["short_code"].isalnum() and data["short_code"].upper() == data["short_code"]


def test_create_marker_minimal_fields(client, auth_headers):
    data = create_marker(
        client,
        auth_headers,
        description="",
        strain=None,
        quantity=None,
        owner_name=None,
        owner_contact=None,
    )
    assert data["description"] is None
    assert data["quantity"] is None
    assert data["image_url"] is None


@pytest.mark.parametrize(
    "overrides, field",
    [
        ({"name": ""}, "name"),
        ({"name": "x" * 101}, "name"),
        ({"latitude": "91"}, "latitude"),
        ({"longitude": "-180.5"}, "longitude"),
        ({"latitude": "north"}, "latitude"),
        ({"quantity": -1}, "quantity"),
        ({"quantity": "lots"}, "quantity"),
        ({"owner_contact": "0" * 51}, "owner_contact"),
    ],
)
def test_create_marker_validation(client, auth_headers, overrides, field):
    payload = dict(MARKER, **overrides)
    resp = client.post("/api/v1/markers", json=payload, headers=auth_headers)
    assert resp.status_code == 422
    assert field in resp.get_json()["details"]


def test_create_marker_missing_coordinates(client, auth_headers):
    resp = client.post("/api/v1/markers", json={"name": "No coords"}, headers=auth_headers)
    assert resp.status_code == 422
    details = resp.get_json()["details"]
    assert "latitude" in details and "longitude" in details


@pytest.mark.parametrize("image_url", ["/uploads/markers/abc.jpg", "photo-42", "https://cdn.example.com/a.png"])
def test_image_url_is_stored_as_given(client, auth_headers, image_url):
    data = create_marker(client, auth_headers, image_url=image_url)
    assert data["image_url"] == image_url


def test_get_marker(client, auth_headers):
    created = create_marker(client, auth_headers)
    resp = client.get(f"/api/v1/markers/{created['id']}", headers=auth_headers)
    assert resp.status_code == 200
    assert resp.get_json()["data"]["short_code"] == created["short_code"]


def test_get_marker_bad_id_and_missing(client, auth_headers):
    assert client.get("/api/v1/markers/not-a-uuid", headers=auth_headers).status_code == 400
    missing = client.get("/api/v1/markers/00000000-0000-4000-8000-000000000000", headers=auth_headers)
    assert missing.status_code == 404
    assert missing.get_json()["message"] == "Marker not found"


def test_get_by_short_code_is_public(client, auth_headers):
    created = create_marker(client, auth_headers)
    resp = client.get(f"/api/v1/markers/code/{created['short_code'].lower()}")
    assert resp.status_code == 200
    assert resp.get_json()["data"]["id"] == created["id"]
    assert client.get("/api/v1/markers/code/ZZZZZZZZ").status_code == 404


def test_update_marker_keeps_unsent_fields(client, auth_headers):
    created = create_marker(client, auth_headers)
    resp = client.put(
        f"/api/v1/markers/{created['id']}",
        json={"name": "Renamed", "quantity": 3},
        headers=auth_headers,
    )
    assert resp.status_code == 200
    data = resp.get_json()["data"]
    assert data["name"] == "Renamed"
    assert data["quantity"] == 3
    assert data["strain"] == MARKER["strain"]
    assert data["short_code"] == created["short_code"]


def test_update_marker_validation(client, auth_headers):
    created = create_marker(client, auth_headers)
    resp = client.put(f"/api/v1/markers/{created['id']}", json={"latitude": "100"}, headers=auth_headers)
    assert resp.status_code == 422


def test_delete_marker(client, auth_headers):
    created = create_marker(client, auth_headers)
    assert client.delete(f"/api/v1/markers/{created['id']}", headers=auth_headers).status_code == 204
    assert client.get(f"/api/v1/markers/{created['id']}", headers=auth_headers).status_code == 404


def test_list_markers_lightweight(client, auth_headers):
    create_marker(client, auth_headers, name="One")
    create_marker(client, auth_headers, name="Two")
    resp = client.get("/api/v1/markers", headers=auth_headers)
    assert resp.status_code == 200
    items = resp.get_json()["data"]
    assert len(items) == 2
    assert set(items[0]) == {"id", "short_code", "name", "latitude", "longitude"}


def test_list_markers_empty(client, auth_headers):
    resp = client.get("/api/v1/markers", headers=auth_headers)
    assert resp.get_json()["data"] == []


def test_paginated_defaults_and_clamping(client, auth_headers):
    for i in range(3):
        create_marker(client, auth_headers, name=f"Marker {i}")

    resp = client.get("/api/v1/markers/paginated?page=0&per_page=1000&sort_by=bogus&sort_dir=up", headers=auth_headers)
    body = resp.get_json()
    assert body["meta"]["pagination"] == {
        "current_page": 1,
        "per_page": 100,
        "total_items": 3,
        "total_pages": 1,
    }
    assert body["meta"]["sort_by"] == "created_at"
    assert body["meta"]["sort_dir"] == "desc"

    resp = client.get("/api/v1/markers/paginated?per_page=abc", headers=auth_headers)
    assert resp.get_json()["meta"]["pagination"]["per_page"] == 10


def test_paginated_pages_and_sorting(client, auth_headers):
    for name in ("Cendana", "Apus", "Betung", "Duri", "Ater"):
        create_marker(client, auth_headers, name=name)

    resp = client.get("/api/v1/markers/paginated?per_page=2&page=2&sort_by=name&sort_dir=asc", headers=auth_headers)
    body = resp.get_json()
    assert [m["name"] for m in body["data"]] == ["Betung", "Cendana"]
    assert body["meta"]["pagination"]["total_pages"] == 3

    resp = client.get("/api/v1/markers/paginated?per_page=2&page=9", headers=auth_headers)
    assert resp.get_json()["data"] == []


def test_paginated_search_and_creator_filter(client, auth_headers):
    create_marker(client, auth_headers, name="Riverside", strain="Gigantochloa apus")
    create_marker(client, auth_headers, name="Hilltop", strain="Bambusa vulgaris")

    register(client, email="other@b.com")
    other_headers = bearer(login(client, email="other@b.com")["access_token"])
    theirs = create_marker(client, other_headers, name="Other garden", strain="Bambusa vulgaris")

    resp = client.get("/api/v1/markers/paginated?search=VULGARIS", headers=auth_headers)
    assert {m["name"] for m in resp.get_json()["data"]} == {"Hilltop", "Other garden"}

    resp = client.get(f"/api/v1/markers/paginated?creator_id={theirs['creator_id']}", headers=auth_headers)
    assert [m["name"] for m in resp.get_json()["data"]] == ["Other garden"]

    # unparseable filters are ignored
    resp = client.get("/api/v1/markers/paginated?creator_id=nope&date_from=yesterday", headers=auth_headers)
    assert resp.get_json()["meta"]["pagination"]["total_items"] == 3


def test_paginated_date_filter(client, auth_headers):
    create_marker(client, auth_headers)
    resp = client.get("/api/v1/markers/paginated?date_to=2000-01-01", headers=auth_headers)
    assert resp.get_json()["meta"]["pagination"]["total_items"] == 0
    resp = client.get("/api/v1/markers/paginated?date_from=2000-01-01", headers=auth_headers)
    assert resp.get_json()["meta"]["pagination"]["total_items"] == 1
