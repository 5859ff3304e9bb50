import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session
from werkzeug.security import check_password_hash

from app.linog.models import Admin
from scripts.init_db import seed_only


def _admins(db_url):
    engine = create_engine(db_url, future=True)
    try:
        with Session(engine) as s:
            return [(a.username, a.password_hash) for a in s.query(Admin).all()]
    finally:
        engine.dispose()


def test_seed_creates_admin_once(tmp_path, monkeypatch):
    db_url = f"sqlite:///{tmp_path/'seed.db'}"
    monkeypatch.setenv("ADMIN_USERNAME", "ops")
    monkeypatch.setenv("ADMIN_PASSWORD", "first")
    seed_only(database_url=db_url, create_tables=True)

    monkeypatch.setenv("ADMIN_PASSWORD", "second")
    seed_only(database_url=db_url)

    admins = _admins(db_url)
    assert len(admins) == 1
    username, password_hash = admins[0]
    assert username == "ops"
    assert check_password_hash(password_hash, "first")


def test_seed_refuses_empty_password(tmp_path, monkeypatch):
    db_url = f"sqlite:///{tmp_path/'seed.db'}"
    monkeypatch.delenv("ADMIN_USERNAME", raising=False)
    monkeypatch.delenv("ADMIN_PASSWORD", raising=False)
    with pytest.raises(RuntimeError, match="ADMIN_PASSWORD"):
        seed_only(database_url=db_url, create_tables=True)
    assert _admins(db_url) == []
