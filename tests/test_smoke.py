from sqlalchemy import create_engine


def test_health_ok(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json == {"ok": True, "database": "ok"}


def test_health_reports_unreachable_database(app, client, tmp_path):
    app.extensions["sqlalchemy_engine"] = create_engine(f"sqlite:///{tmp_path}/missing-dir/x.db")
    r = client.get("/health")
    assert r.status_code == 503
    assert r.json == {"ok": False, "database": "unavailable"}

    assert client.get("/healthz").status_code == 200


def test_healthz_ok(client):
    r = client.get("/healthz")
    assert r.status_code == 200
    assert r.data == b"ok"


def test_request_id_header_is_set(client):
    r = client.get("/api/updates")
    assert r.status_code == 200
    assert len(r.headers["X-Request-ID"]) == 32


def test_unknown_route_is_json_404(client):
    r = client.get("/api/nope")
    assert r.status_code == 404
    assert r.json == {"error": "Not Found"}


def test_wrong_method_is_json_405(client):
    r = client.post("/api/markers", json={})
    assert r.status_code == 405
    assert "error" in r.json


def test_public_lists_start_empty(client):
    for path in ("/api/markers", "/api/updates", "/api/donations", "/api/image-groups"):
        r = client.get(path)
        assert r.status_code == 200, path
        assert r.json == [], path
