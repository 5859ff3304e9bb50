import argparse
import sys
from pathlib import Path
import os

from werkzeug.security import generate_password_hash
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from contextlib import contextmanager

# Ensure repo root is on sys.path when running as a script.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from app.linog.models import Admin, Base


@contextmanager
def _session_scope(database_url: str):
    engine = create_engine(database_url, future=True)
    sm = sessionmaker(bind=engine, class_=Session, autoflush=False, autocommit=False, expire_on_commit=False, future=True)
    s: Session = sm()
    try:
        yield s
        s.commit()
    except Exception:
        s.rollback()
        raise
    finally:
        s.close()
        engine.dispose()


def seed_only(*, database_url: str | None = None, create_tables: bool = False) -> None:
    """
    Provision the admin identity in an idempotent way.
    Does NOT overwrite an existing admin's password.
    """
    admin_username = (os.environ.get("ADMIN_USERNAME") or "admin").strip()
    admin_password = os.environ.get("ADMIN_PASSWORD") or ""

    db_url = (database_url or os.environ.get("DATABASE_URL") or "sqlite:///linog.db").strip()

    if create_tables:
        engine = create_engine(db_url, future=True)
        Base.metadata.create_all(bind=engine)
        engine.dispose()

    with _session_scope(db_url) as s:
        admin = s.query(Admin).filter(Admin.username == admin_username).one_or_none()
        if admin:
            print(f"Admin already exists: {admin_username} (password unchanged)")
            return
        if not admin_password:
            raise RuntimeError("ADMIN_PASSWORD must be set to provision the admin account.")
        s.add(Admin(username=admin_username, password_hash=generate_password_hash(admin_password)))

    print("Initialized database (seed_only).")
    print(f"Admin username: {admin_username}")
    print("Admin password: (from ADMIN_PASSWORD)")


def main() -> None:
    parser = argparse.ArgumentParser(description="Provision the admin account.")
    parser.add_argument("--create-tables", action="store_true", help="Create missing tables first (dev only; use alembic in production)")
    args = parser.parse_args()
    seed_only(database_url=None, create_tables=args.create_tables)


if __name__ == "__main__":
    main()
