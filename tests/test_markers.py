"""Tests for the Markers module."""
from concurrent.futures import ThreadPoolExecutor

import pytest

from app.linog.db import session_scope
from app.linog.modules.image_groups.models import Image


def _marker(**overrides):
    payload = {"latitude": 10.3157, "longitude": 123.8854, "description": "Test"}
    payload.update(overrides)
    return payload


def test_marker_create_then_list_roundtrip(client, auth_headers):
    r = client.post("/api/admin/marker", json=_marker(), headers=auth_headers)
    assert r.status_code == 200
    marker_id = r.json["id"]

    markers = client.get("/api/markers").json
    assert len(markers) == 1
    m = markers[0]
    assert m["id"] == marker_id
    assert m["latitude"] == 10.3157
    assert m["longitude"] == 123.8854
    assert m["description"] == "Test"
    assert m["created_at"]
    assert m["images"] == []


def test_marker_detail_and_404(client, auth_headers):
    marker_id = client.post("/api/admin/marker", json=_marker(), headers=auth_headers).json["id"]
    assert client.get(f"/api/markers/{marker_id}").json["description"] == "Test"
    r = client.get("/api/markers/999999")
    assert r.status_code == 404
    assert r.json == {"error": "Marker not found"}


@pytest.mark.parametrize(
    "lat,lng",
    [(90, 180), (-90, -180), (90, -180), (-90, 180), (0, 0), ("45.5", "-120.25")],
)
def test_marker_boundary_coordinates_accepted(client, auth_headers, lat, lng):
    r = client.post("/api/admin/marker", json=_marker(latitude=lat, longitude=lng), headers=auth_headers)
    assert r.status_code == 200


@pytest.mark.parametrize(
    "overrides,field",
    [
        ({"latitude": 95}, "latitude"),
        ({"latitude": -90.0001}, "latitude"),
        ({"longitude": 200}, "longitude"),
        ({"longitude": -180.5}, "longitude"),
    ],
)
def test_marker_out_of_range_rejected(client, auth_headers, overrides, field):
    r = client.post("/api/admin/marker", json=_marker(**overrides), headers=auth_headers)
    assert r.status_code == 400
    assert r.json["errors"] == [
        {"field": field, "code": "out_of_range", "message": r.json["errors"][0]["message"]}
    ]
    assert client.get("/api/markers").json == []


def test_marker_missing_fields_reported_distinctly(client, auth_headers):
    r = client.post("/api/admin/marker", json={"latitude": 95}, headers=auth_headers)
    assert r.status_code == 400
    codes = {e["field"]: e["code"] for e in r.json["errors"]}
    assert codes == {"latitude": "out_of_range", "longitude": "missing", "description": "missing"}


@pytest.mark.parametrize("value", ["north", True, [1], {"a": 1}, "nan"])
def test_marker_non_numeric_coordinate_is_invalid(client, auth_headers, value):
    r = client.post("/api/admin/marker", json=_marker(latitude=value), headers=auth_headers)
    assert r.status_code == 400
    assert r.json["errors"][0]["code"] == "invalid"


def test_marker_non_object_body_is_400(client, auth_headers):
    r = client.post("/api/admin/marker", json=[1, 2], headers=auth_headers)
    assert r.status_code == 400
    assert r.json["errors"][0]["field"] == "body"


def test_markers_listed_newest_first(client, auth_headers):
    first = client.post("/api/admin/marker", json=_marker(description="first"), headers=auth_headers).json["id"]
    second = client.post("/api/admin/marker", json=_marker(description="second"), headers=auth_headers).json["id"]
    ids = [m["id"] for m in client.get("/api/markers").json]
    assert ids == [second, first]


def test_marker_images_are_stored_in_order(client, auth_headers):
    payload = _marker(
        images=[
            {"url": "https://img.example/a.jpg", "caption": "A"},
            {"image_url": "https://img.example/b.jpg"},
            {"url": "https://img.example/c.jpg", "caption": "C", "display_order": -1},
        ]
    )
    marker_id = client.post("/api/admin/marker", json=payload, headers=auth_headers).json["id"]
    images = client.get(f"/api/markers/{marker_id}").json["images"]
    assert [i["image_url"] for i in images] == [
        "https://img.example/c.jpg",
        "https://img.example/a.jpg",
        "https://img.example/b.jpg",
    ]
    assert images[1]["caption"] == "A"
    assert all(i["marker_id"] == marker_id and i["group_id"] is None for i in images)


def test_marker_image_without_url_rejected(client, auth_headers):
    r = client.post("/api/admin/marker", json=_marker(images=[{"caption": "no url"}]), headers=auth_headers)
    assert r.status_code == 400
    assert r.json["errors"][0]["field"] == "images[0].image_url"
    assert r.json["errors"][0]["code"] == "missing"


def test_marker_edit_replaces_fields_and_keeps_created_at(client, auth_headers):
    marker_id = client.post(
        "/api/admin/marker", json=_marker(images=[{"url": "https://img.example/a.jpg"}]), headers=auth_headers
    ).json["id"]
    before = client.get(f"/api/markers/{marker_id}").json

    r = client.put(
        f"/api/admin/marker/{marker_id}",
        json=_marker(latitude=11.0, description="Moved"),
        headers=auth_headers,
    )
    assert r.status_code == 200
    after = client.get(f"/api/markers/{marker_id}").json
    assert after["latitude"] == 11.0
    assert after["description"] == "Moved"
    assert after["created_at"] == before["created_at"]
    # no "images" key: images untouched
    assert [i["image_url"] for i in after["images"]] == ["https://img.example/a.jpg"]


def test_marker_edit_with_images_replaces_them(app, client, auth_headers):
    marker_id = client.post(
        "/api/admin/marker",
        json=_marker(images=[{"url": "https://img.example/a.jpg"}, {"url": "https://img.example/b.jpg"}]),
        headers=auth_headers,
    ).json["id"]
    client.put(
        f"/api/admin/marker/{marker_id}",
        json=_marker(images=[{"url": "https://img.example/z.jpg"}]),
        headers=auth_headers,
    )
    images = client.get(f"/api/markers/{marker_id}").json["images"]
    assert [i["image_url"] for i in images] == ["https://img.example/z.jpg"]
    with session_scope(app) as s:
        assert s.query(Image).count() == 1


def test_marker_edit_validation_failure_changes_nothing(client, auth_headers):
    marker_id = client.post("/api/admin/marker", json=_marker(), headers=auth_headers).json["id"]
    r = client.put(f"/api/admin/marker/{marker_id}", json=_marker(longitude=200), headers=auth_headers)
    assert r.status_code == 400
    assert client.get(f"/api/markers/{marker_id}").json["longitude"] == 123.8854


def test_marker_edit_and_delete_unknown_id_404(client, auth_headers):
    assert client.put("/api/admin/marker/999999", json=_marker(), headers=auth_headers).status_code == 404
    assert client.delete("/api/admin/marker/999999", headers=auth_headers).status_code == 404


def test_marker_ids_beyond_integer_range_are_404(client, auth_headers):
    huge = 10**20
    assert client.get(f"/api/markers/{huge}").status_code == 404
    assert client.put(f"/api/admin/marker/{huge}", json=_marker(), headers=auth_headers).status_code == 404
    assert client.delete(f"/api/admin/marker/{huge}", headers=auth_headers).status_code == 404


def test_marker_edit_with_null_images_clears_them(app, client, auth_headers):
    marker_id = client.post(
        "/api/admin/marker",
        json=_marker(images=[{"url": "https://img.example/a.jpg"}]),
        headers=auth_headers,
    ).json["id"]
    r = client.put(f"/api/admin/marker/{marker_id}", json=_marker(images=None), headers=auth_headers)
    assert r.status_code == 200
    assert client.get(f"/api/markers/{marker_id}").json["images"] == []
    with session_scope(app) as s:
        assert s.query(Image).count() == 0


def test_marker_image_display_order_out_of_range(client, auth_headers):
    r = client.post(
        "/api/admin/marker",
        json=_marker(images=[{"url": "https://img.example/a.jpg", "display_order": 10**20}]),
        headers=auth_headers,
    )
    assert r.status_code == 400
    assert r.json["errors"] == [
        {
            "field": "images[0].display_order",
            "code": "out_of_range",
            "message": "display_order must be between -2147483648 and 2147483647.",
        }
    ]
    assert client.get("/api/markers").json == []


def test_marker_timestamps_are_utc(client, auth_headers):
    client.post("/api/admin/marker", json=_marker(), headers=auth_headers)
    assert client.get("/api/markers").json[0]["created_at"].endswith("+00:00")


def test_marker_delete_cascades_images(app, client, auth_headers):
    marker_id = client.post(
        "/api/admin/marker",
        json=_marker(images=[{"url": "https://img.example/a.jpg"}, {"url": "https://img.example/b.jpg"}]),
        headers=auth_headers,
    ).json["id"]
    r = client.delete(f"/api/admin/marker/{marker_id}", headers=auth_headers)
    assert r.status_code == 200
    assert r.json["images_deleted"] == 2
    assert client.get(f"/api/markers/{marker_id}").status_code == 404
    with session_scope(app) as s:
        assert s.query(Image).filter(Image.marker_id == marker_id).count() == 0


def test_concurrent_marker_creation(app, auth_headers):
    def create(desc):
        c = app.test_client()
        return c.post("/api/admin/marker", json=_marker(description=desc), headers=auth_headers)

    with ThreadPoolExecutor(max_workers=2) as pool:
        results = list(pool.map(create, ["one", "two"]))

    assert [r.status_code for r in results] == [200, 200]
    ids = {r.json["id"] for r in results}
    assert len(ids) == 2
    listed = app.test_client().get("/api/markers").json
    assert {m["id"] for m in listed} == ids
    assert {m["description"] for m in listed} == {"one", "two"}
