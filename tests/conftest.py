"""
Shared pytest fixtures: an app bound to a throwaway SQLite file with one
provisioned admin, a test client, and a logged-in Authorization header.
"""
import pytest
from werkzeug.security import generate_password_hash

from app.linog import create_app
from app.linog.db import session_scope
from app.linog.models import Admin, Base

ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "pw"


@pytest.fixture()
def app(tmp_path, monkeypatch):
    monkeypatch.setenv("SECRET_KEY", "test-secret")
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path/'test.db'}")
    monkeypatch.setenv("ENV", "test")
    for k in ("API_PREFIX", "TOKEN_TTL_HOURS", "LOGIN_RATE_LIMIT", "LOGIN_RATE_WINDOW"):
        monkeypatch.delenv(k, raising=False)

    app = create_app()
    engine = app.extensions["sqlalchemy_engine"]
    Base.metadata.create_all(bind=engine)

    with session_scope(app) as s:
        s.add(Admin(username=ADMIN_USERNAME, password_hash=generate_password_hash(ADMIN_PASSWORD)))

    yield app
    engine.dispose()


@pytest.fixture()
def client(app):
    return app.test_client()


def login(client, username=ADMIN_USERNAME, password=ADMIN_PASSWORD):
    return client.post("/api/admin/login", json={"username": username, "password": password})


@pytest.fixture()
def auth_headers(client):
    r = login(client)
    assert r.status_code == 200
    return {"Authorization": f"Bearer {r.json['token']}"}
