import json
from typing import Any

from flask import g, has_request_context, request
from sqlalchemy.orm import Session

from app.linog.models import AuditEvent


def record_event(
    s: Session,
    *,
    actor_id: int | None,
    actor_username: str | None,
    action: str,
    entity_type: str | None = None,
    entity_id: str | None = None,
    metadata: dict[str, Any] | None = None,
    request_id: str | None = None,
) -> AuditEvent:
    """
    Append-only audit event helper. The caller owns the transaction.
    """
    in_request = has_request_context()
    rid = request_id or (getattr(g, "request_id", None) if in_request else None)
    ev = AuditEvent(
        request_id=rid,
        actor_admin_id=actor_id,
        actor_username=actor_username,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        metadata_json=json.dumps(metadata, sort_keys=True, default=str) if metadata else None,
        client_ip=request.remote_addr if in_request else None,
    )
    s.add(ev)
    return ev


def record_admin_event(s: Session, action: str, **kwargs: Any) -> AuditEvent:
    """Audit an action performed by the admin attached to the current request."""
    claims = getattr(g, "current_admin", None)
    return record_event(
        s,
        actor_id=claims.sub if claims else None,
        actor_username=claims.username if claims else None,
        action=action,
        **kwargs,
    )
