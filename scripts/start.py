#!/usr/bin/env python3
"""
Container entry point.

Runs the release phase (migrations + admin provisioning), then replaces this
process with gunicorn serving ``app.wsgi:app``.

Environment:
    PORT              listen port (default 5000)
    WEB_CONCURRENCY   gunicorn worker count (default 2)
    SKIP_RELEASE=1    start gunicorn without migrating (e.g. extra replicas)
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

DEFAULT_PORT = 5000
DEFAULT_WORKERS = 2


def _positive_int(name: str, raw: str | None, default: int, *, upper: int | None = None) -> int:
    raw = (raw or "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")
    if value < 1 or (upper is not None and value > upper):
        bound = f"1-{upper}" if upper is not None else ">= 1"
        raise ValueError(f"{name} out of range ({bound}), got {value}")
    return value


def gunicorn_argv(port: int, workers: int) -> list[str]:
    return [
        "gunicorn",
        "app.wsgi:app",
        "--bind", f"0.0.0.0:{port}",
        "--workers", str(workers),
        "--timeout", "60",
        "--preload",
        "--access-logfile", "-",
        "--error-logfile", "-",
    ]


def main() -> None:
    try:
        port = _positive_int("PORT", os.environ.get("PORT"), DEFAULT_PORT, upper=65535)
        workers = _positive_int("WEB_CONCURRENCY", os.environ.get("WEB_CONCURRENCY"), DEFAULT_WORKERS)
    except ValueError as e:
        print(f"ERROR: {e}", flush=True)
        sys.exit(1)

    if os.environ.get("SKIP_RELEASE", "").strip() == "1":
        print("SKIP_RELEASE=1; not running migrations", flush=True)
    else:
        from scripts.release import run_release

        try:
            run_release()
        except Exception as e:
            print(f"Release failed: {e}", flush=True)
            sys.exit(1)

    print(f"Starting gunicorn on 0.0.0.0:{port} with {workers} worker(s)", flush=True)
    os.execvp("gunicorn", gunicorn_argv(port, workers))


if __name__ == "__main__":
    main()
