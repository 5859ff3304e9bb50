"""
Release phase: migrate the schema to head, then provision the admin account.

Refuses to run without DATABASE_URL, and refuses SQLite when ENV is production.
Seeding is idempotent and never rewrites an existing admin's password.

Usage:
  python scripts/release.py [--no-seed]
"""

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path


ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


def release_database_url() -> str:
    db_url = (os.environ.get("DATABASE_URL") or "").strip()
    if not db_url:
        raise RuntimeError("Missing required environment variable DATABASE_URL.")
    env = (os.environ.get("ENV") or "").strip().lower()
    if env in ("prod", "production") and db_url.startswith("sqlite"):
        raise RuntimeError("Refusing to release against sqlite in production. Set DATABASE_URL to Postgres.")
    return db_url


def alembic_config(db_url: str):
    from alembic.config import Config

    cfg = Config(str(ROOT / "alembic.ini"))
    cfg.set_main_option("script_location", str(ROOT / "migrations"))
    cfg.set_main_option("sqlalchemy.url", db_url)
    return cfg


def run_release(*, seed: bool = True) -> None:
    from alembic import command

    db_url = release_database_url()
    print("Running migrations...", flush=True)
    command.upgrade(alembic_config(db_url), "head")

    if seed:
        from scripts import init_db

        print("Provisioning admin...", flush=True)
        init_db.seed_only(database_url=db_url)
    print("Release complete.", flush=True)


def main() -> None:
    parser = argparse.ArgumentParser(description="Migrate the database and provision the admin account.")
    parser.add_argument("--no-seed", action="store_true", help="Only run migrations")
    args = parser.parse_args()
    run_release(seed=not args.no_seed)


if __name__ == "__main__":
    main()
