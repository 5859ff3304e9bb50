from sqlalchemy.exc import OperationalError

from app.linog.db import session_scope
from app.linog.modules.markers.models import Marker


def test_store_failure_on_read_is_generic_500(client, monkeypatch):
    def _fail(s):
        raise OperationalError("SELECT * FROM markers", {}, Exception("database is locked"))

    monkeypatch.setattr("app.linog.modules.markers.routes.list_markers", _fail)
    r = client.get("/api/markers")
    assert r.status_code == 500
    assert r.json == {"error": "Internal server error"}
    assert "locked" not in r.get_data(as_text=True)
    assert r.headers.get("X-Request-ID")


def test_store_failure_on_write_rolls_back(app, client, auth_headers, monkeypatch):
    def _fail(*args, **kwargs):
        raise OperationalError("INSERT INTO audit_events", {}, Exception("disk I/O error"))

    monkeypatch.setattr("app.linog.modules.markers.service.record_admin_event", _fail)
    r = client.post(
        "/api/admin/marker",
        json={"latitude": 11.05, "longitude": 124.0, "description": "Bogo"},
        headers=auth_headers,
    )
    assert r.status_code == 500
    assert r.json == {"error": "Internal server error"}
    assert "disk" not in r.get_data(as_text=True)
    with session_scope(app) as s:
        assert s.query(Marker).count() == 0


def test_validation_error_shape(client, auth_headers):
    r = client.post("/api/admin/marker", json={"latitude": "north"}, headers=auth_headers)
    assert r.status_code == 400
    body = r.json
    assert body["error"] == "Validation failed"
    assert all(set(e) == {"field", "code", "message"} for e in body["errors"])


def test_oversized_body_is_413(app, client, auth_headers):
    app.config["MAX_CONTENT_LENGTH"] = 64
    r = client.post(
        "/api/admin/update",
        json={"title": "x", "content": "y" * 500},
        headers=auth_headers,
    )
    assert r.status_code == 413
    assert r.json == {"error": "Request body too large."}
