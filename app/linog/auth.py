from __future__ import annotations

import time
from functools import lru_cache

from flask import Blueprint, current_app, g, jsonify, request
from sqlalchemy.orm import Session
from werkzeug.security import check_password_hash, generate_password_hash

from app.linog.audit import record_event
from app.linog.db import db_session
from app.linog.errors import INVALID, MISSING, FieldError, LinogError
from app.linog.models import Admin
from app.linog.security import token_service
from app.linog.utils import json_body, raise_if_errors, require_text

bp = Blueprint("auth", __name__)


class RateLimitedError(LinogError):
    status_code = 429
    message = "Too many login attempts. Please wait and try again."


class InvalidCredentialsError(LinogError):
    status_code = 401
    message = "Invalid credentials"


@lru_cache(maxsize=1)
def _dummy_password_hash() -> str:
    return generate_password_hash("linog-dummy-password")


def verify_credentials(s: Session, username: str, password: str) -> Admin | None:
    """
    Return the admin for a matching username/password pair, otherwise None.

    Unknown usernames still pay for a digest check so the two failure paths
    cannot be told apart by timing.
    """
    admin = s.query(Admin).filter(Admin.username == username).one_or_none()
    if admin is None:
        check_password_hash(_dummy_password_hash(), password)
        return None
    if not check_password_hash(admin.password_hash, password):
        return None
    return admin


def _now() -> float:
    return time.monotonic()


def _login_attempts() -> dict[str, list[float]]:
    return current_app.extensions.setdefault("login_attempts", {})


def _check_rate_limit(ip: str) -> bool:
    attempts = _login_attempts()
    cutoff = _now() - current_app.config["LOGIN_RATE_WINDOW"]
    recent = [t for t in attempts.get(ip, ()) if t > cutoff]
    if not recent:
        attempts.pop(ip, None)
        return False
    attempts[ip] = recent
    return len(recent) >= current_app.config["LOGIN_RATE_LIMIT"]


def _record_attempt(ip: str) -> None:
    _login_attempts().setdefault(ip, []).append(_now())


@bp.post("/admin/login")
def login():
    ip = request.remote_addr or "unknown"
    if _check_rate_limit(ip):
        current_app.logger.warning("Login rate limit hit ip=%s request_id=%s", ip, getattr(g, "request_id", None))
        raise RateLimitedError()

    payload = json_body()
    errors: list[FieldError] = []
    username = require_text(payload, "username", errors)
    # Passwords are compared verbatim, never stripped.
    password = payload.get("password")
    if password is None or password == "":
        errors.append(FieldError("password", MISSING, "Password is required."))
    elif not isinstance(password, str):
        errors.append(FieldError("password", INVALID, "Password must be a string."))
    raise_if_errors(errors)

    _record_attempt(ip)

    s = db_session()
    admin = verify_credentials(s, username, password)
    if admin is None:
        record_event(
            s,
            actor_id=None,
            actor_username=None,
            action="admin.login_failed",
            entity_type="Admin",
            metadata={"username": username},
        )
        s.commit()
        raise InvalidCredentialsError()

    issued = token_service().issue(admin)
    _login_attempts().pop(ip, None)
    record_event(
        s,
        actor_id=admin.id,
        actor_username=admin.username,
        action="admin.login",
        entity_type="Admin",
        entity_id=str(admin.id),
    )
    s.commit()
    current_app.logger.info("Admin login username=%s request_id=%s", admin.username, getattr(g, "request_id", None))
    return jsonify(
        {
            "token": issued.token,
            "username": admin.username,
            "expires_at": issued.claims.expires_at.isoformat(),
        }
    )
